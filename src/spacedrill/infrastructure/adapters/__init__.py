# Infrastructure Adapters Package
from .http_store import HttpItemStore
from .memory_store import InMemoryItemStore
from .yaml_store import YamlItemStore

__all__ = ["InMemoryItemStore", "YamlItemStore", "HttpItemStore"]
