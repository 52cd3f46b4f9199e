"""Base item model with lazy attribute fetching and caching.

An item is built from an attribute fragment (a mapping sent by the server)
without any network I/O. Attributes that are not cached yet are fetched on
first access, in one round trip, and merged into the local store. Merging
never drops keys that the new fragment does not mention.
"""

from __future__ import annotations

import logging
import threading
import weakref
from collections.abc import Mapping
from datetime import datetime
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar, Optional

from .exceptions import BoxNotFoundError, BoxProtocolError
from .utils import normalize_key, parse_iso_timestamp

if TYPE_CHECKING:
    from .api import BoxClient
    from .folder import Folder

logger = logging.getLogger(__name__)

# Discriminator value -> item class, filled in as variants are defined
ITEM_TYPES: dict[str, type[Item]] = {}


def item_class(item_type: str) -> type[Item]:
    """Return the item class registered for a ``type`` discriminator.

    Raises:
        BoxProtocolError: If the discriminator is not a known item type
    """
    try:
        return ITEM_TYPES[item_type]
    except (KeyError, TypeError):
        raise BoxProtocolError(f"Unknown item type: {item_type!r}") from None


def item_from_fragment(
    client: BoxClient, fragment: Any, owner: Optional[Item] = None
) -> Item:
    """Build the matching item variant from a raw attribute fragment.

    Args:
        client: Client used by the new item
        fragment: Mapping carrying a ``type`` discriminator
        owner: Item whose attributes contained the fragment

    Returns:
        A File, Folder, Comment, Discussion or Version

    Raises:
        BoxProtocolError: If the fragment is not a mapping or its type is unknown
    """
    if isinstance(fragment, Item):
        return fragment
    if not isinstance(fragment, Mapping):
        raise BoxProtocolError(
            f"Expected an item fragment, got {type(fragment).__name__}"
        )

    cls = item_class(fragment.get("type"))
    return cls(client, fragment, owner=owner)


class Item:
    """Base class for everything stored on Box.

    Subclasses set ``item_type`` (the wire discriminator, also used as the
    transport kind) and ``id_key`` (the variant-specific id field).
    """

    item_type: ClassVar[str] = ""
    type_aliases: ClassVar[tuple[str, ...]] = ()
    id_key: ClassVar[Optional[str]] = None

    def __init_subclass__(cls, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        if cls.item_type:
            for name in (cls.item_type, *cls.type_aliases):
                ITEM_TYPES[name] = cls

    def __init__(
        self,
        client: BoxClient,
        info: Optional[Mapping[str, Any]] = None,
        owner: Optional[Item] = None,
    ):
        """Create an item. Performs no network I/O.

        Args:
            client: Client used for fetching and operations
            info: Initial attribute fragment
            owner: Item whose attributes listed this one (kept as a weak
                   reference)
        """
        self.client = client
        self._data: dict[str, Any] = {}
        self._info_loaded = False
        self._owner = weakref.ref(owner) if owner is not None else None
        self._lock = threading.RLock()

        if info:
            self.merge_attributes(info)

    # =========================
    # Identity
    # =========================

    @property
    def id(self) -> Optional[str]:
        """The item's id. Never triggers a fetch."""
        value = self._data.get("id")
        if value is None and self.id_key:
            value = self._data.get(self.id_key)
        return None if value is None else str(value)

    def _require_id(self) -> str:
        item_id = self.id
        if item_id is None:
            raise BoxNotFoundError(f"{type(self).__name__} has no id", name="id")
        return item_id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Item):
            return NotImplemented
        if type(self) is not type(other):
            return False
        if self.id is None or other.id is None:
            return self is other
        return self.id == other.id

    def __hash__(self) -> int:
        return hash((type(self), self.id))

    def __repr__(self) -> str:
        name = self._data.get("name")
        if name is not None:
            return f"<{type(self).__name__} id={self.id!r} name={name!r}>"
        return f"<{type(self).__name__} id={self.id!r}>"

    # =========================
    # Attribute store
    # =========================

    @property
    def attributes(self) -> Mapping[str, Any]:
        """Read-only view of the cached attributes."""
        return MappingProxyType(self._data)

    @property
    def info_loaded(self) -> bool:
        """Whether a full info fetch has happened."""
        return self._info_loaded

    def get(self, name: str, refresh: bool = False) -> Any:
        """Get an attribute, fetching the item's info when needed.

        Args:
            name: Attribute name (normalized like server field names)
            refresh: Fetch the info again even if the attribute is cached

        Returns:
            The attribute value

        Raises:
            BoxNotFoundError: If the attribute is absent after a fetch
        """
        key = normalize_key(name)
        with self._lock:
            if not refresh and key in self._data:
                return self._data[key]

            if refresh or not self._info_loaded:
                self.refresh_info()
                if key in self._data:
                    return self._data[key]

        raise BoxNotFoundError(
            f"{type(self).__name__} {self.id} has no attribute '{key}'", name=key
        )

    def set(self, name: str, value: Any) -> None:
        """Override an attribute locally. Nothing is sent to the server."""
        with self._lock:
            self._data[normalize_key(name)] = value

    def info(self, refresh: bool = False) -> Item:
        """Fetch the item's info unless it is already loaded.

        Args:
            refresh: Fetch even if the info was loaded before

        Returns:
            self
        """
        with self._lock:
            if refresh or not self._info_loaded:
                self.refresh_info()
        return self

    def refresh_info(self) -> Item:
        """Fetch the item's info and merge it into the cache.

        Returns:
            self
        """
        with self._lock:
            logger.debug(f"Fetching info for {self!r}")
            fragment = self._fetch_info()
            self.merge_attributes(fragment)
            self._info_loaded = True
        return self

    def _fetch_info(self) -> Mapping[str, Any]:
        return self.client.fetch_attributes(self.item_type, self._require_id())

    def merge_attributes(self, fragment: Mapping[str, Any]) -> None:
        """Merge a raw attribute fragment into the cache.

        Keys are normalized, the parent folder is wrapped as a Folder, and
        lists of typed fragments are converted into items. Keys not present
        in the fragment are kept.

        Raises:
            BoxProtocolError: If the fragment is not a mapping or contains an
                              unknown item type
        """
        if not isinstance(fragment, Mapping):
            raise BoxProtocolError(
                f"Expected an attribute mapping, got {type(fragment).__name__}"
            )

        normalized = [(normalize_key(k), v) for k, v in fragment.items()]

        # Ids first, so nested items can read their owner's id
        id_keys = {"id", self.id_key}
        with self._lock:
            self._data.update((k, v) for k, v in normalized if k in id_keys)

        converted: dict[str, Any] = {}
        for key, value in normalized:
            if key == "parent":
                value = self._convert_parent(value)
            elif key == "items" and isinstance(value, Mapping):
                # Collection object: {"total_count": ..., "entries": [...]}
                value = value.get("entries")
                if not isinstance(value, list):
                    raise BoxProtocolError("Item collection has no 'entries' list")

            if isinstance(value, list):
                value = self._convert_list(value)

            converted[key] = value

        with self._lock:
            self._data.update(converted)

    def _convert_parent(self, value: Any) -> Any:
        if value is None or isinstance(value, Item):
            return value

        folder_class = item_class("folder")
        if isinstance(value, Mapping):
            return folder_class(self.client, value)
        return folder_class(self.client, {"type": "folder", "id": str(value)})

    def _convert_list(self, values: list[Any]) -> list[Any]:
        converted = []
        for value in values:
            # The server sometimes wraps entries in an extra list
            entries = value if isinstance(value, list) else [value]
            for entry in entries:
                if entry is None:
                    continue
                if isinstance(entry, (Mapping, list)) and not entry:
                    continue
                if isinstance(entry, Mapping) and "type" in entry:
                    entry = item_from_fragment(self.client, entry, owner=self)
                converted.append(entry)
        return converted

    # =========================
    # Typed accessors
    # =========================

    @property
    def type(self) -> str:
        return self._data.get("type") or self.item_type

    @property
    def name(self) -> str:
        return self.get("name")

    @property
    def description(self) -> Optional[str]:
        return self.get("description")

    @property
    def size(self) -> int:
        return int(self.get("size"))

    @property
    def etag(self) -> Optional[str]:
        return self.get("etag")

    @property
    def created_at(self) -> Optional[datetime]:
        return parse_iso_timestamp(self.get("created_at"))

    @property
    def modified_at(self) -> Optional[datetime]:
        return parse_iso_timestamp(self.get("modified_at"))

    @property
    def trashed(self) -> bool:
        """Whether the item is in the trash (or deleted)."""
        try:
            value = self.get("trashed")
        except BoxNotFoundError:
            status = self._data.get("item_status")
            return status is not None and status != "active"
        if isinstance(value, str):
            return value.lower() in ("true", "1", "yes")
        return bool(value)

    @property
    def parent(self) -> Optional[Folder]:
        """The parent folder, or None for the root.

        Items listed in a folder's children point back to that folder.
        Otherwise the parent is built from the ``parent`` attribute, which
        may trigger a fetch.
        """
        owner = self._owner() if self._owner is not None else None
        if owner is not None and isinstance(owner, item_class("folder")):
            return owner

        try:
            value = self.get("parent")
        except BoxNotFoundError:
            return None
        return value if isinstance(value, Item) else None

    # =========================
    # Operations
    # =========================

    def _new_instance(self) -> Item:
        return type(self)(self.client)

    def _from_response(self, fragment: Mapping[str, Any]) -> Item:
        """Build a new item of this class, carrying this item's id."""
        item = self._new_instance()
        item.merge_attributes({"type": self.type, "id": self.id})
        item.merge_attributes(fragment)
        return item

    def _deleted(self, fragment: Mapping[str, Any]) -> Item:
        """Build the post-delete representation of this item."""
        item = self._from_response(fragment)
        if "trashed" not in item._data:
            status = item._data.get("item_status")
            item._data["trashed"] = status != "active" if status else True
        return item

    def update(self, params: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Item:
        """Update the item's attributes on the server.

        Args:
            params: Attributes to change
            **kwargs: More attributes to change

        Returns:
            A new item built from the server's answer
        """
        changes = dict(params or {})
        changes.update(kwargs)
        logger.debug(f"Updating {self!r}: {sorted(changes)}")
        fragment = self.client.update_attributes(
            self.item_type, self._require_id(), changes
        )
        return self._from_response(fragment)

    def delete(self) -> Item:
        """Delete (trash) the item on the server.

        The item in hand is not changed.

        Returns:
            A new item of the same class with ``trashed`` set
        """
        logger.debug(f"Deleting {self!r}")
        fragment = self.client.delete_item(self.item_type, self._require_id())
        return self._deleted(fragment)
