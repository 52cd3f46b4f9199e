"""Comments left on files and discussions."""

from .item import Item


class Comment(Item):
    """A comment on a file or discussion."""

    item_type = "comment"
    id_key = "comment_id"

    @property
    def message(self) -> str:
        return self.get("message")
