"""
Item Store Factory
Centralizes the logic for selecting the appropriate ItemStore adapter.
"""

from spacedrill.application.config import AppConfig
from spacedrill.domain.ports import ItemStore
from spacedrill.infrastructure.adapters import HttpItemStore, InMemoryItemStore, YamlItemStore


def get_item_store(config: AppConfig) -> ItemStore:
    """
    Returns the ItemStore implementation selected by config.backend.
    """
    if config.backend == "http":
        return HttpItemStore(url=config.store_url, timeout=config.request_timeout)

    if config.backend == "memory":
        return InMemoryItemStore()

    return YamlItemStore(config.data_file)
