"""Repository storing the catalog as JSON inside the collection root."""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from .errors import MissingStateError, StateError
from .models import CatalogState

DEFAULT_STATE_DIRNAME = ".treesync"
CATALOG_FILENAME = "catalog.json"
LOG_FILENAME = "treesync.log"


class StateRepository:
    """Manage the persistence of the catalog for a collection root."""

    def __init__(self, base_dirname: str = DEFAULT_STATE_DIRNAME) -> None:
        """Initialize the repository with an optional base directory name.

        Args:
            base_dirname: Name of the directory that stores the catalog.
        """
        self._base_dirname = base_dirname

    @property
    def base_dirname(self) -> str:
        """Return the directory name used for catalog artifacts.

        Returns:
            str: Name of the directory that stores state artifacts.
        """
        return self._base_dirname

    def exists(self, root: Path) -> bool:
        return (self.state_dir(root) / CATALOG_FILENAME).exists()

    def load(self, root: Path) -> CatalogState:
        """Load the catalog for the given root.

        Args:
            root: Root path of the collection.

        Returns:
            CatalogState: Deserialized catalog for the collection.

        Raises:
            MissingStateError: If no catalog file is present.
            StateError: If stored data cannot be read or parsed.
        """
        catalog_path = self.state_dir(root) / CATALOG_FILENAME
        if not catalog_path.exists():
            raise MissingStateError(f"No catalog found at {catalog_path}")

        try:
            data = json.loads(catalog_path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise StateError(f"Unable to read catalog: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise StateError(f"Invalid catalog data: {exc}") from exc

        try:
            return CatalogState.model_validate(data)
        except ValidationError as exc:
            raise StateError(f"Invalid catalog data: {exc}") from exc

    def save(self, root: Path, state: CatalogState) -> None:
        """Persist the catalog atomically.

        The payload is written to a temporary file in the state directory and
        then moved over the previous catalog, so readers see either the old or
        the new catalog in full.

        Args:
            root: Root path of the collection.
            state: Catalog to serialize.

        Raises:
            StateError: If the catalog cannot be written.
        """
        directory = self.initialize(root)
        state.updated_at = datetime.now(timezone.utc)
        if state.created_at.tzinfo is None:
            state.created_at = state.created_at.replace(tzinfo=timezone.utc)
        payload = json.dumps(state.model_dump(mode="json"), indent=2, sort_keys=False)

        handle, temp_name = tempfile.mkstemp(prefix="catalog-", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(handle, "w", encoding="utf-8") as stream:
                stream.write(payload)
            os.replace(temp_name, directory / CATALOG_FILENAME)
        except OSError as exc:
            Path(temp_name).unlink(missing_ok=True)
            raise StateError(f"Unable to write catalog: {exc}") from exc

    def initialize(self, root: Path) -> Path:
        """Prepare the state directory for a collection.

        Args:
            root: Root path of the collection.

        Returns:
            Path: Directory containing the state artifacts.
        """
        directory = self.state_dir(root)
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    def state_dir(self, root: Path) -> Path:
        """Return the path to the state directory for a collection.

        Args:
            root: Root path of the collection.

        Returns:
            Path: State directory for the collection.
        """
        return root / self._base_dirname


__all__ = ["StateRepository", "DEFAULT_STATE_DIRNAME", "CATALOG_FILENAME", "LOG_FILENAME"]
