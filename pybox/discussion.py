"""Discussions attached to folders."""

import logging

from .comment import Comment
from .item import Item

logger = logging.getLogger(__name__)


class Discussion(Item):
    """A discussion attached to a folder."""

    item_type = "discussion"
    id_key = "discussion_id"

    def comments(self) -> list[Comment]:
        """Get the comments of this discussion, in server order."""
        fragments = self.client.list_comments(self.item_type, self._require_id())
        return [Comment(self.client, fragment) for fragment in fragments]

    def add_comment(self, message: str) -> Comment:
        """Add a comment to this discussion.

        Returns:
            The new comment
        """
        logger.debug(f"Adding comment to {self!r}")
        fragment = self.client.add_comment(self.item_type, self._require_id(), message)
        return Comment(self.client, fragment)
