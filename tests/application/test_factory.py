from spacedrill.application.config import resolve_config
from spacedrill.application.factory import get_item_store
from spacedrill.infrastructure.adapters import HttpItemStore, InMemoryItemStore, YamlItemStore


def test_file_backend(tmp_path):
    store = get_item_store(resolve_config({"data_file": tmp_path / "deck.yaml"}))
    assert isinstance(store, YamlItemStore)
    assert store.path == tmp_path / "deck.yaml"


def test_http_backend():
    config = resolve_config(
        {"backend": "http", "store_url": "http://deck.local:9000/", "request_timeout": 5}
    )
    store = get_item_store(config)
    assert isinstance(store, HttpItemStore)
    assert store.url == "http://deck.local:9000"
    assert store.timeout == 5


def test_memory_backend():
    assert isinstance(get_item_store(resolve_config({"backend": "memory"})), InMemoryItemStore)
