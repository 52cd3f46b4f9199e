"""pybox - client library for Box file storage."""

from .account import Account
from .api import BoxClient
from .comment import Comment
from .discussion import Discussion
from .exceptions import (
    BoxAPIError,
    BoxAuthenticationError,
    BoxConfigError,
    BoxDownloadError,
    BoxError,
    BoxInvalidPathError,
    BoxNetworkError,
    BoxNotFoundError,
    BoxPermissionError,
    BoxProtocolError,
    BoxRateLimitError,
    BoxResourceNotFoundError,
    BoxUploadError,
)
from .file import File
from .folder import Folder
from .item import Item, item_from_fragment
from .version import Version

__all__ = [
    "Account",
    "BoxClient",
    "Comment",
    "Discussion",
    "File",
    "Folder",
    "Item",
    "Version",
    "item_from_fragment",
    "BoxAPIError",
    "BoxAuthenticationError",
    "BoxConfigError",
    "BoxDownloadError",
    "BoxError",
    "BoxInvalidPathError",
    "BoxNetworkError",
    "BoxNotFoundError",
    "BoxPermissionError",
    "BoxProtocolError",
    "BoxRateLimitError",
    "BoxResourceNotFoundError",
    "BoxUploadError",
]
