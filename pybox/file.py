"""File items: content transfer, versions and comments."""

import logging
from pathlib import Path
from typing import Optional, Union

from .comment import Comment
from .item import Item
from .utils import Content
from .version import Version

logger = logging.getLogger(__name__)


class File(Item):
    """A file stored on Box."""

    item_type = "file"
    id_key = "file_id"

    @property
    def sha1(self) -> Optional[str]:
        return self.get("sha1")

    # =========================
    # Content transfer
    # =========================

    def download(self, path: Union[str, Path, None] = None) -> bytes:
        """Download the file's content.

        Args:
            path: Optional local path to also write the content to

        Returns:
            Content as bytes
        """
        data = self.client.download_content(self._require_id())
        if path is not None:
            Path(path).write_bytes(data)
            logger.debug(f"Downloaded {self!r} to {path}")
        return data

    def upload_overwrite(self, content: Content) -> "File":
        """Upload new content for this file.

        Returns:
            A new File built from the server's answer
        """
        fragment = self.client.upload_content(
            self._require_id(), content, mode="overwrite"
        )
        return File(self.client, fragment)

    def upload_copy(
        self, content: Content, destination_id: Optional[str] = None
    ) -> "File":
        """Upload content as a new copy of this file.

        Args:
            content: Bytes, a local path, or a binary file object
            destination_id: Folder for the copy (defaults to this file's parent)

        Returns:
            The new file
        """
        if destination_id is None:
            parent = self.parent
            destination_id = parent.id if parent is not None else None

        fragment = self.client.upload_content(
            self._require_id(), content, mode="copy", destination_id=destination_id
        )
        return File(self.client, fragment)

    # =========================
    # Versions
    # =========================

    def versions(self) -> list[Version]:
        """Get the versions of this file, in server order."""
        file_id = self._require_id()
        fragments = self.client.list_versions(file_id)
        return [Version(self.client, fragment, file_id=file_id) for fragment in fragments]

    def version(self, version_id: str) -> Version:
        """Get one version of this file."""
        file_id = self._require_id()
        fragment = self.client.fetch_version(file_id, version_id)
        return Version(self.client, fragment, file_id=file_id)

    def delete_version(self, version_id: str) -> Version:
        """Delete one version of this file.

        Returns:
            The post-delete representation of the version
        """
        version = Version(self.client, {"id": version_id}, file_id=self._require_id())
        return version.delete()

    def download_version(
        self, version_id: str, path: Union[str, Path, None] = None
    ) -> bytes:
        """Download the content of one version of this file."""
        version = Version(self.client, {"id": version_id}, file_id=self._require_id())
        return version.download(path)

    # =========================
    # Comments
    # =========================

    def comments(self) -> list[Comment]:
        """Get the comments on this file, in server order."""
        fragments = self.client.list_comments(self.item_type, self._require_id())
        return [Comment(self.client, fragment) for fragment in fragments]

    def add_comment(self, message: str) -> Comment:
        """Add a comment to this file.

        Returns:
            The new comment
        """
        fragment = self.client.add_comment(self.item_type, self._require_id(), message)
        return Comment(self.client, fragment)
