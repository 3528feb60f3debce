"""Catalog persistence for data filed under relative folder paths."""

from .catalog import CatalogRecordStore
from .errors import MissingStateError, StateError
from .models import CatalogState, DataEntry
from .repository import CATALOG_FILENAME, DEFAULT_STATE_DIRNAME, LOG_FILENAME, StateRepository

__all__ = [
    "StateRepository",
    "CatalogRecordStore",
    "DEFAULT_STATE_DIRNAME",
    "CATALOG_FILENAME",
    "LOG_FILENAME",
    "CatalogState",
    "DataEntry",
    "StateError",
    "MissingStateError",
]
