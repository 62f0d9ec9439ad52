"""Posts and the Comments they own"""

from blogapp.entity import BaseEntity
from blogapp.fields import Auto, Boolean, Reference, String, Text


class Post(BaseEntity):
    """A published article. Parent of zero or more Comments."""

    id = Auto(identifier=True)
    title = String(max_length=255)
    body = Text()
    published = Boolean(default=False)


class Comment(BaseEntity):
    """A reader-submitted reply, always owned by exactly one Post.

    A Comment holds its Post's key, never the Post itself.
    """

    id = Auto(identifier=True)
    post_id = Reference(Post, required=True)
    body = Text()
