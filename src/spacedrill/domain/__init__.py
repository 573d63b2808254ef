# Domain Package
from .errors import InvalidOperation, InvalidRating, ItemNotFound, SpacedrillError, StoreError
from .models import DecayProfile, Item, ItemState, Rating, RatingEvent, ReviewQueueEntry
from .ports import ItemStore

__all__ = [
    "SpacedrillError",
    "InvalidOperation",
    "InvalidRating",
    "StoreError",
    "ItemNotFound",
    "Rating",
    "ItemState",
    "Item",
    "RatingEvent",
    "ReviewQueueEntry",
    "DecayProfile",
    "ItemStore",
]
