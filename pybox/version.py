"""File versions."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Union

from .exceptions import BoxNotFoundError
from .item import Item, item_class

if TYPE_CHECKING:
    from .api import BoxClient

logger = logging.getLogger(__name__)


class Version(Item):
    """A version of a file.

    Versions are addressed through the file they belong to, so every
    version remembers its file's id.
    """

    item_type = "version"
    type_aliases = ("file_version",)
    id_key = "version_id"

    def __init__(
        self,
        client: BoxClient,
        info: Optional[Mapping[str, Any]] = None,
        owner: Optional[Item] = None,
        file_id: Optional[str] = None,
    ):
        if file_id is None and isinstance(owner, item_class("file")):
            file_id = owner.id
        self._file_id = file_id
        super().__init__(client, info, owner=owner)

    @property
    def file_id(self) -> Optional[str]:
        """Id of the file this version belongs to."""
        return self._file_id

    def _require_file_id(self) -> str:
        file_id = self.file_id
        if file_id is None:
            raise BoxNotFoundError(f"{self!r} does not know its file", name="file_id")
        return file_id

    def _fetch_info(self) -> Mapping[str, Any]:
        return self.client.fetch_version(self._require_file_id(), self._require_id())

    def _new_instance(self) -> Version:
        return Version(self.client, file_id=self.file_id)

    def update(
        self, params: Optional[Mapping[str, Any]] = None, **kwargs: Any
    ) -> Version:
        """Update this version's attributes through its file.

        Returns:
            A new Version built from the server's answer
        """
        changes = dict(params or {})
        changes.update(kwargs)
        logger.debug(f"Updating {self!r} of file {self._file_id}: {sorted(changes)}")
        fragment = self.client.update_version(
            self._require_file_id(), self._require_id(), changes
        )
        return self._from_response(fragment)

    def delete(self) -> Version:
        """Delete this version of the file.

        Returns:
            A new Version with ``trashed`` set
        """
        logger.debug(f"Deleting {self!r} of file {self.file_id}")
        fragment = self.client.delete_version(self._require_file_id(), self._require_id())
        return self._deleted(fragment)

    def download(self, path: Union[str, Path, None] = None) -> bytes:
        """Download the content of this version.

        Args:
            path: Optional local path to also write the content to

        Returns:
            Content as bytes
        """
        data = self.client.download_content(
            self._require_file_id(), version_id=self._require_id()
        )
        if path is not None:
            Path(path).write_bytes(data)
        return data
