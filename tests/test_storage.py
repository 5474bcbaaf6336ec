"""
Tests for storage backends and configuration
"""

import os
from unittest.mock import Mock

import pytest

from storefront.cart import build_cart_store
from storefront.config import Settings, get_settings
from storefront.storage import (
    FileStorage,
    MemoryStorage,
    RedisStorage,
    build_storage,
    read_json,
    write_json,
)


class TestMemoryStorage:
    """Tests for MemoryStorage."""

    def test_get_set_remove(self):
        storage = MemoryStorage()
        assert storage.get("k") is None

        storage.set("k", "v")
        assert storage.get("k") == "v"

        storage.remove("k")
        storage.remove("k")
        assert storage.get("k") is None


class TestFileStorage:
    """Tests for FileStorage."""

    def test_get_set_remove(self, tmp_path):
        storage = FileStorage(tmp_path / "nested" / "dir")
        assert storage.get("cart-storage") is None

        storage.set("cart-storage", '{"items": []}')
        assert (tmp_path / "nested" / "dir" / "cart-storage.json").read_text() == '{"items": []}'
        assert storage.get("cart-storage") == '{"items": []}'

        storage.remove("cart-storage")
        storage.remove("cart-storage")
        assert storage.get("cart-storage") is None

    def test_key_cannot_escape_directory(self, tmp_path):
        storage = FileStorage(tmp_path / "store")
        storage.set("../evil", "x")

        assert not (tmp_path / "evil.json").exists()
        assert storage.get("../evil") == "x"


class TestRedisStorage:
    """Tests for RedisStorage with a mocked Upstash client."""

    def test_requires_credentials(self):
        with pytest.raises(ValueError):
            RedisStorage()

    def test_prefixed_keys(self):
        client = Mock()
        client.get.return_value = '{"items": []}'
        storage = RedisStorage(client=client)

        storage.set("cart-storage", "{}")
        assert storage.get("cart-storage") == '{"items": []}'
        storage.remove("cart-storage")

        client.set.assert_called_once_with("storefront:cart-storage", "{}")
        client.get.assert_called_once_with("storefront:cart-storage")
        client.delete.assert_called_once_with("storefront:cart-storage")

    def test_missing_key(self):
        client = Mock()
        client.get.return_value = None

        assert RedisStorage(client=client).get("cart-storage") is None

    def test_redis_outage_absorbed_by_cart(self, make_product):
        """Test a failing Redis never breaks cart mutations."""
        client = Mock()
        client.get.side_effect = ConnectionError("redis down")
        client.set.side_effect = ConnectionError("redis down")
        store = build_cart_store(Settings(), storage=RedisStorage(client=client))

        store.add_item(make_product("A", 10), 2)

        assert store.quantity_of("A") == 2
        assert client.set.called


class TestJsonHelpers:
    """Tests for read_json / write_json."""

    def test_round_trip(self):
        storage = MemoryStorage()
        assert write_json(storage, "k", {"a": [1, 2]}) is True
        assert read_json(storage, "k") == {"a": [1, 2]}

    def test_unserializable_value(self):
        storage = MemoryStorage()
        assert write_json(storage, "k", {"a": object()}) is False
        assert storage.get("k") is None

    def test_corrupted(self):
        storage = MemoryStorage()
        storage.set("k", "{")
        assert read_json(storage, "k") is None


class TestSettings:
    """Tests for environment configuration."""

    def test_defaults(self, monkeypatch, tmp_path):
        for key in (
            "STOREFRONT_API_URL",
            "STOREFRONT_STORAGE",
            "STOREFRONT_STORAGE_DIR",
            "CART_STORAGE_KEY",
            "CATALOG_CACHE_TTL",
            "CATALOG_HTTP_TIMEOUT",
        ):
            monkeypatch.delenv(key, raising=False)

        settings = get_settings(env_file=str(tmp_path / "missing.env"))

        assert settings.api_url == "https://fakestoreapi.com"
        assert settings.storage_backend == "memory"
        assert settings.cart_storage_key == "cart-storage"
        assert settings.cache_ttl == 300

    def test_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STOREFRONT_API_URL", "https://shop.example/api/")
        monkeypatch.setenv("STOREFRONT_STORAGE", "FILE")
        monkeypatch.setenv("CART_STORAGE_KEY", "my-cart")
        monkeypatch.setenv("CATALOG_CACHE_TTL", "60")

        settings = get_settings(env_file=str(tmp_path / "missing.env"))

        assert settings.api_url == "https://shop.example/api"
        assert settings.storage_backend == "file"
        assert settings.cart_storage_key == "my-cart"
        assert settings.cache_ttl == 60

    def test_invalid_values_fall_back(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STOREFRONT_STORAGE", "postgres")
        monkeypatch.setenv("CATALOG_CACHE_TTL", "soon")
        monkeypatch.setenv("CATALOG_HTTP_TIMEOUT", "-1")

        settings = get_settings(env_file=str(tmp_path / "missing.env"))

        assert settings.storage_backend == "memory"
        assert settings.cache_ttl == 300
        assert settings.http_timeout == 10

    def test_env_file(self, monkeypatch, tmp_path):
        monkeypatch.delenv("CART_STORAGE_KEY", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("CART_STORAGE_KEY=from-dotenv\n")

        assert get_settings(env_file=str(env_file)).cart_storage_key == "from-dotenv"
        os.environ.pop("CART_STORAGE_KEY", None)

    def test_build_storage(self, tmp_path):
        assert isinstance(build_storage(Settings()), MemoryStorage)

        file_storage = build_storage(Settings(storage_backend="file", storage_dir=str(tmp_path)))
        assert isinstance(file_storage, FileStorage)

        with pytest.raises(ValueError):
            build_storage(Settings(storage_backend="redis"))

        redis_storage = build_storage(Settings(storage_backend="redis", redis_url="https://r.test", redis_token="t"))
        assert isinstance(redis_storage, RedisStorage)

    def test_build_cart_store_uses_configured_key(self, make_product):
        storage = MemoryStorage()
        store = build_cart_store(Settings(cart_storage_key="session-cart"), storage=storage)
        store.add_item(make_product("A", 1))

        assert storage.get("session-cart") is not None
