"""
YAML file ItemStore: one deck file holding items and the review log.

Layout:

    items:
      - id: 01J...
        easeFactor: 2.5
        intervalDays: 0
        nextReviewDate: '2026-10-19'
        suspended: false
    reviews:
      - itemId: 01J...
        rating: 3
        ...

The whole file is rewritten (atomically) after every mutation, which keeps
item writes last-write-wins and the review log append-only.
"""

import logging
import os
from pathlib import Path

import yaml

from spacedrill.domain.errors import StoreError
from spacedrill.infrastructure.serialization import (
    event_from_wire,
    event_to_wire,
    item_from_wire,
    item_to_wire,
)

from .memory_store import InMemoryItemStore

logger = logging.getLogger(__name__)


class YamlItemStore(InMemoryItemStore):
    """Loads the deck once and writes it back on every change."""

    def __init__(self, path: Path):
        self.path = Path(path)
        items, events = self._load()
        super().__init__(items=items, events=events)
        logger.debug(f"Loaded {len(items)} items and {len(events)} reviews from {self.path}")

    def _load(self):
        if not self.path.exists():
            return [], []

        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(f"Could not read deck file {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StoreError(f"Deck file {self.path} must contain a mapping")

        items = [item_from_wire(raw) for raw in data.get("items") or []]
        events = [event_from_wire(raw) for raw in data.get("reviews") or []]
        return items, events

    def _changed(self) -> None:
        data = {
            "items": [item_to_wire(item) for item in self._items.values()],
            "reviews": [event_to_wire(event) for event in self._events],
        }
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(
                yaml.safe_dump(data, sort_keys=False, allow_unicode=True), encoding="utf-8"
            )
            os.replace(tmp, self.path)
        except OSError as e:
            raise StoreError(f"Could not write deck file {self.path}: {e}") from e
