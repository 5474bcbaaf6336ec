"""Cart snapshot persistence over a key/value storage backend."""
from typing import Any, Iterable

from pydantic import ValidationError

from storefront.config import DEFAULT_CART_STORAGE_KEY
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.storage import KeyValueStorage, read_json, remove_key, write_json
from .models import CartLine

logger = get_logger(__name__)


class CartPersistence:
    """
    Reads and writes the whole cart as one JSON snapshot.

    Snapshot shape: {"items": [{"id", "title", "price", "image", "category",
    "quantity"}, ...]}. Snapshots wrapped as {"state": {"items": [...]}}
    (as written by browser state-persistence libraries) are read as well.

    Nothing here raises: storage and parse failures are logged, load()
    falls back to an empty cart and save() reports False.
    """

    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_CART_STORAGE_KEY):
        self.storage = storage
        self.key = key

    def load(self) -> list[CartLine]:
        """Load the persisted cart, dropping entries that fail validation."""
        data = read_json(self.storage, self.key)
        if data is None:
            return []

        if isinstance(data, dict) and "items" not in data and isinstance(data.get("state"), dict):
            data = data["state"]

        entries = data.get("items") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            logger.warning("Cart snapshot under %s has no item list, starting empty", self.key)
            return []

        return self._parse_entries(entries)

    def _parse_entries(self, entries: list[Any]) -> list[CartLine]:
        lines: list[CartLine] = []
        seen: set = set()

        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                logger.warning("Dropping cart snapshot entry %d: not an object", index)
                continue
            try:
                line = CartLine.from_dict(entry)
            except ValidationError as e:
                logger.warning(
                    "Dropping malformed cart snapshot entry %d (%d errors)", index, e.error_count()
                )
                continue
            if line.product_id in seen:
                logger.warning(
                    "Dropping duplicate cart snapshot entry for product %s",
                    sanitize_id_for_logging(line.product_id),
                )
                continue
            seen.add(line.product_id)
            lines.append(line)

        return lines

    def save(self, lines: Iterable[CartLine]) -> bool:
        """Write the full cart. Returns False if the write failed."""
        snapshot = {"items": [line.to_dict() for line in lines]}
        saved = write_json(self.storage, self.key, snapshot)
        if not saved:
            logger.warning("Cart not persisted; continuing with in-memory state")
        return saved

    def clear(self) -> bool:
        """Remove the snapshot from storage."""
        return remove_key(self.storage, self.key)
