"""Exception hierarchy shared by every layer."""


class SpacedrillError(Exception):
    """Base class for all spacedrill errors."""


class InvalidOperation(SpacedrillError):
    """A precondition was violated by the caller (programming error)."""


class InvalidRating(InvalidOperation):
    """A rating outside 1..4 was supplied."""

    def __init__(self, rating: object):
        super().__init__(f"Rating must be one of 1, 2, 3, 4 (got {rating!r})")
        self.rating = rating


class StoreError(SpacedrillError):
    """An ItemStore adapter failed to read or write."""


class ItemNotFound(StoreError):
    """The requested item does not exist in the store."""

    def __init__(self, item_id: str):
        super().__init__(f"Item not found: {item_id}")
        self.item_id = item_id
