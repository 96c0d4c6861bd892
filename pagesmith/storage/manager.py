"""
Persistence manager for Pagesmith.

This module loads and saves the typed workspace collections (pages,
databases, templates, settings) to a key-value backend. Every collection is
stored whole as one JSON document; dates are written as ISO-8601 strings and
revived on load. A stored value that is missing or does not match its
collection's shape is replaced by the built-in default instead of failing.
"""

import json
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

from ..models import Database, Page, Settings, Template, utc_now
from .backends import KeyValueBackend, StorageError
from .defaults import default_pages, default_settings, default_templates


PAGES_KEY = "pages"
DATABASES_KEY = "databases"
TEMPLATES_KEY = "templates"
SETTINGS_KEY = "settings"


@dataclass
class Collection:
    """How one stored collection is validated and what replaces it when unreadable."""
    adapter: TypeAdapter
    default: Callable[[], Any]


COLLECTIONS: Dict[str, Collection] = {
    PAGES_KEY: Collection(TypeAdapter(List[Page]), default_pages),
    DATABASES_KEY: Collection(TypeAdapter(List[Database]), list),
    TEMPLATES_KEY: Collection(TypeAdapter(List[Template]), default_templates),
    SETTINGS_KEY: Collection(TypeAdapter(Settings), default_settings),
}


class ImportResult(BaseModel):
    """Outcome of importing an exported workspace."""
    success: bool
    error: Optional[str] = None


class PersistenceStore:
    """
    Loads and saves workspace collections.

    The store is an ordinary object: create one per backend and hand it to
    the components that need it. Listeners registered with ``subscribe`` are
    told the collection key after every successful save.
    Read-modify-write operations hold one lock, so pages saved from a timer
    thread and from the caller never overwrite each other.
    """

    def __init__(self, backend: KeyValueBackend, key_prefix: str = "pagesmith_"):
        """
        Initialize the persistence store.

        Args:
            backend: The storage medium
            key_prefix: Prefix applied to collection keys in the backend
        """
        self.backend = backend
        self.key_prefix = key_prefix
        self._lock = threading.RLock()
        self._listeners: List[Callable[[str], None]] = []

    def _collection(self, key: str) -> Collection:
        if key not in COLLECTIONS:
            raise KeyError(f"Unknown collection '{key}'")
        return COLLECTIONS[key]

    def _storage_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    # Generic collection access

    def save(self, key: str, value: Any) -> None:
        """
        Validate and write a whole collection.

        Args:
            key: Collection key (pages, databases, templates, settings)
            value: The collection value; models or plain dicts

        Raises:
            KeyError: If the key names no known collection
            StorageError: If the backend refuses the write
        """
        collection = self._collection(key)
        validated = collection.adapter.validate_python(value)
        payload = collection.adapter.dump_json(validated, by_alias=True)

        with self._lock:
            self.backend.set(self._storage_key(key), payload.decode('utf-8'))
        self._notify(key)

    def load(self, key: str) -> Any:
        """
        Read a collection, reviving date fields.

        Missing, unparsable or shape-mismatched values are replaced by the
        collection's built-in default.

        Args:
            key: Collection key (pages, databases, templates, settings)

        Returns:
            The validated collection
        """
        collection = self._collection(key)

        try:
            raw = self.backend.get(self._storage_key(key))
        except StorageError as e:
            logging.error(f"Error loading {key}: {e}")
            return collection.default()

        if raw is None:
            return collection.default()

        try:
            return collection.adapter.validate_json(raw)
        except ValidationError as e:
            logging.warning(f"Stored {key} are malformed, falling back to defaults: {e.error_count()} error(s)")
            return collection.default()

    # Change notification

    def subscribe(self, listener: Callable[[str], None]) -> Callable[[], None]:
        """
        Register a listener for saves.

        Args:
            listener: Called with the collection key after each save

        Returns:
            A function that unregisters the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, key: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(key)
            except Exception as e:
                logging.error(f"Storage listener failed for {key}: {e}")

    # Page management

    def load_pages(self) -> List[Page]:
        return self.load(PAGES_KEY)

    def save_pages(self, pages: List[Page]) -> None:
        self.save(PAGES_KEY, pages)

    def get_page(self, page_id: str) -> Optional[Page]:
        """Find one page by id."""
        for page in self.load_pages():
            if page.id == page_id:
                return page
        return None

    def save_page(self, page: Page) -> None:
        """
        Insert or replace a page.

        The full collection is loaded, the page with the same id is replaced
        (with a fresh ``updated_at``) or the page is appended, and the whole
        collection is written back.
        """
        with self._lock:
            pages = self.load_pages()

            for index, existing in enumerate(pages):
                if existing.id == page.id:
                    pages[index] = page.model_copy(update={"updated_at": utc_now()})
                    break
            else:
                pages.append(page)

            self.save_pages(pages)

    def update_page(self, page: Page, changes: Dict[str, Any]) -> Page:
        """
        Apply field changes to the stored copy of a page.

        Fields not named in ``changes`` keep their stored values, so concurrent
        edits to other fields (title, parent) are not overwritten. A page that
        is no longer stored is saved from ``page`` with the changes applied.

        Returns:
            The page as written
        """
        with self._lock:
            pages = self.load_pages()

            for index, existing in enumerate(pages):
                if existing.id == page.id:
                    updated = existing.model_copy(update=changes)
                    pages[index] = updated
                    break
            else:
                updated = page.model_copy(update=changes)
                pages.append(updated)

            self.save_pages(pages)
            return updated

    def delete_page(self, page_id: str) -> List[str]:
        """
        Delete a page and its direct children.

        Grandchildren are left in place; the page tree shows them as roots.

        Returns:
            Ids of the removed pages
        """
        with self._lock:
            pages = self.load_pages()
            kept = [p for p in pages if p.id != page_id and p.parent_id != page_id]
            removed = [p.id for p in pages if p.id == page_id or p.parent_id == page_id]

            if removed:
                self.save_pages(kept)
                logging.info(f"Deleted page {page_id} and {len(removed) - 1} child page(s)")

        return removed

    # Database management

    def load_databases(self) -> List[Database]:
        return self.load(DATABASES_KEY)

    def save_databases(self, databases: List[Database]) -> None:
        self.save(DATABASES_KEY, databases)

    def save_database(self, database: Database) -> None:
        """Insert or replace a database, stamping a fresh ``updated_at`` on replace."""
        with self._lock:
            databases = self.load_databases()

            for index, existing in enumerate(databases):
                if existing.id == database.id:
                    databases[index] = database.model_copy(update={"updated_at": utc_now()})
                    break
            else:
                databases.append(database)

            self.save_databases(databases)

    # Templates and settings

    def load_templates(self) -> List[Template]:
        return self.load(TEMPLATES_KEY)

    def save_templates(self, templates: List[Template]) -> None:
        self.save(TEMPLATES_KEY, templates)

    def load_settings(self) -> Settings:
        return self.load(SETTINGS_KEY)

    def save_settings(self, settings: Settings) -> None:
        self.save(SETTINGS_KEY, settings)

    # Export/Import functionality

    def export_data(self) -> str:
        """Render every collection as one JSON document."""
        data = {
            "pages": [page.to_record() for page in self.load_pages()],
            "databases": [database.to_record() for database in self.load_databases()],
            "templates": [template.to_record() for template in self.load_templates()],
            "settings": self.load_settings().to_record(),
            "exportedAt": utc_now().isoformat()
        }
        return json.dumps(data, indent=2, ensure_ascii=False)

    def import_data(self, json_data: str) -> ImportResult:
        """
        Replace collections with those found in an exported document.

        Every section present is validated before anything is written, so a
        bad document leaves the stored data untouched.
        """
        try:
            data = json.loads(json_data)
        except json.JSONDecodeError:
            return ImportResult(success=False, error="Invalid JSON format")

        if not isinstance(data, dict):
            return ImportResult(success=False, error="Invalid JSON format")

        sections = {}
        for key, collection in COLLECTIONS.items():
            if data.get(key) is None:
                continue
            try:
                sections[key] = collection.adapter.validate_python(data[key])
            except ValidationError as e:
                return ImportResult(success=False, error=f"Invalid {key}: {e.error_count()} error(s)")

        try:
            with self._lock:
                for key, value in sections.items():
                    self.save(key, value)
        except StorageError as e:
            logging.error(f"Import failed while writing: {e}")
            return ImportResult(success=False, error=str(e))

        logging.info(f"Imported {', '.join(sections) or 'nothing'}")
        return ImportResult(success=True)
