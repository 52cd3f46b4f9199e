"""Folder items: children, search and path resolution."""

import logging
import re
from collections.abc import Mapping
from typing import Any, Optional

from .discussion import Discussion
from .exceptions import BoxInvalidPathError, BoxNotFoundError, BoxProtocolError
from .file import File
from .item import Item
from .utils import Content

logger = logging.getLogger(__name__)


def _lookup(item: Item, name: str) -> Any:
    """Read a criteria attribute, preferring the class's typed accessor.

    Raises:
        TypeError: If the name is a method rather than an attribute
    """
    accessor = getattr(type(item), name, None)
    if isinstance(accessor, property):
        return getattr(item, name)
    if callable(accessor):
        raise TypeError(f"'{name}' is a method, not an attribute")
    return item.get(name)


def _compare(expected: Any, value: Any) -> bool:
    if isinstance(expected, type):
        return isinstance(value, expected)
    if isinstance(expected, re.Pattern):
        return isinstance(value, str) and expected.search(value) is not None
    if callable(expected):
        return bool(expected(value))
    return expected == value


def matches(item: Item, criteria: Mapping[str, Any]) -> bool:
    """Check whether an item satisfies every criterion.

    A criterion's expected value may be a class (isinstance check), a
    compiled regex (searched in string values), a callable (truthy result)
    or a plain value (equality). An attribute the item lacks, or a value
    that cannot be compared, makes the item a non-match.
    """
    for name, expected in criteria.items():
        try:
            if not _compare(expected, _lookup(item, name)):
                return False
        except (BoxNotFoundError, TypeError, ValueError) as e:
            logger.debug(f"{item!r} does not match on '{name}': {e}")
            return False
    return True


class Folder(Item):
    """A folder stored on Box."""

    item_type = "folder"
    id_key = "folder_id"

    # =========================
    # Children
    # =========================

    def children(self) -> list[Item]:
        """Get the files and folders directly inside this folder.

        Uses the cached ``items`` attribute, fetching the folder's info if it
        is not loaded yet. When the info carries no children, they are listed
        with one extra request.

        Returns:
            Children in server order
        """
        with self._lock:
            if "items" not in self._data and not self._info_loaded:
                self.refresh_info()
            if self._data.get("items") is None:
                logger.debug(f"Listing children of {self!r}")
                entries = self.client.list_children(self._require_id())
                self.merge_attributes({"items": entries})

            items = self._data["items"]
            if not isinstance(items, list):
                raise BoxProtocolError(f"Children of {self!r} are not a list")
            return list(items)

    def files(self) -> list[File]:
        """Get the files directly inside this folder."""
        return [item for item in self.children() if isinstance(item, File)]

    def folders(self) -> list["Folder"]:
        """Get the folders directly inside this folder."""
        return [item for item in self.children() if isinstance(item, Folder)]

    # =========================
    # Search
    # =========================

    def find(
        self,
        criteria: Optional[Mapping[str, Any]] = None,
        *,
        recursive: bool = False,
        **kwargs: Any,
    ) -> list[Item]:
        """Find children matching all criteria.

        Args:
            criteria: Attribute or property name -> expected value or
                      matcher. Method names never match.
            recursive: Also search every subfolder, depth first
            **kwargs: More criteria

        Returns:
            Matching items. With ``recursive``, matches of this folder come
            first, followed by each subfolder's matches in order.

        Examples:
            >>> folder.find(name="README")  # doctest: +SKIP
            >>> folder.find(type="file", sha1="abcdefg", recursive=True)  # doctest: +SKIP
            >>> folder.find(name=re.compile(r"\\.mp4$"), recursive=True)  # doctest: +SKIP
        """
        conditions = dict(criteria or {})
        conditions.update(kwargs)
        return self._find(conditions, recursive, set())

    def _find(
        self, criteria: dict[str, Any], recursive: bool, visited: set[str]
    ) -> list[Item]:
        if self.id is not None:
            visited.add(self.id)

        children = self.children()
        found = [item for item in children if matches(item, criteria)]

        if recursive:
            for item in children:
                if not isinstance(item, Folder):
                    continue
                # Prevent infinite recursion
                if item.id is not None and item.id in visited:
                    continue
                found.extend(item._find(criteria, recursive, visited))

        return found

    # =========================
    # Path resolution
    # =========================

    def root(self) -> "Folder":
        """Walk up the parent chain to the root folder."""
        current = self
        seen = {current.id}
        while True:
            parent = current.parent
            if parent is None or parent.id in seen:
                return current
            seen.add(parent.id)
            current = parent

    def resolve(self, path: str) -> Item:
        """Get the item at the given path.

        Paths follow the usual unix syntax: a leading ``/`` starts at the
        root folder, ``.`` is the current folder and ``..`` its parent. A
        trailing ``/`` means the target must be a folder.

        Args:
            path: Path to resolve

        Returns:
            The item at that path

        Raises:
            BoxInvalidPathError: If a segment is looked up inside a non-folder
            BoxNotFoundError: If a segment does not exist
        """
        current: Item = self.root() if path.startswith("/") else self
        container: Optional[Folder] = None
        target_name: Optional[str] = None

        for segment in path.split("/"):
            if segment in ("", "."):
                continue

            if segment == "..":
                # The root is its own parent
                parent = current.parent
                if parent is not None:
                    current = parent
                container = None
                target_name = None
                continue

            if not isinstance(current, Folder):
                raise BoxInvalidPathError(
                    f"Cannot look up '{segment}' in {current!r}: not a folder",
                    name=segment,
                )

            found = current.find(name=segment)
            if not found:
                raise BoxNotFoundError(
                    f"No item named '{segment}' in {current!r}", name=segment
                )
            container, target_name, current = current, segment, found[0]

        if path.endswith("/") and not isinstance(current, Folder):
            folder = None
            if container is not None:
                folder = next(
                    (f for f in container.folders() if matches(f, {"name": target_name})),
                    None,
                )
            if folder is None:
                raise BoxInvalidPathError(
                    f"No folder named '{target_name}' at '{path}'", name=target_name
                )
            current = folder

        logger.debug(f"Resolved '{path}' from {self!r} to {current!r}")
        return current

    def at(self, path: str) -> Optional[Item]:
        """Get the item at the given path, or None if there is none.

        Examples:
            >>> folder.at("/box/is/awesome")  # doctest: +SKIP
            >>> folder.at("awesome/file.pdf")  # doctest: +SKIP
            >>> folder.at("../other/folder/")  # doctest: +SKIP
        """
        try:
            return self.resolve(path)
        except BoxNotFoundError as e:
            logger.debug(f"Nothing at '{path}' from {self!r}: {e}")
            return None

    # =========================
    # Operations
    # =========================

    def create_folder(self, name: str) -> "Folder":
        """Create a new folder inside this folder.

        Returns:
            The new folder
        """
        fragment = self.client.create_folder(self._require_id(), name)
        return Folder(self.client, fragment)

    def upload_file(self, content: Content, name: Optional[str] = None) -> File:
        """Upload a new file into this folder.

        Args:
            content: Bytes, a local path, or a binary file object
            name: File name (defaults to the content's name)

        Returns:
            The new file
        """
        fragment = self.client.upload_content(
            self._require_id(), content, mode="new", name=name
        )
        return File(self.client, fragment)

    def create_discussion(
        self, name: str, description: Optional[str] = None
    ) -> Discussion:
        """Start a discussion attached to this folder."""
        params = {"name": name}
        if description is not None:
            params["description"] = description
        fragment = self.client.create_discussion(self._require_id(), params)
        return Discussion(self.client, fragment)

    def discussions(self) -> list[Discussion]:
        """Get the discussions attached to this folder."""
        fragments = self.client.list_discussions(self._require_id())
        return [Discussion(self.client, fragment) for fragment in fragments]
