"""Store implementations."""

from mailpull.infrastructure.stores.json_known_id_store import STORE_FILENAME, JsonKnownIdStore

__all__ = [
    "JsonKnownIdStore",
    "STORE_FILENAME",
]
