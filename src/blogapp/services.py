"""Application services: the operations that create, read and destroy Posts and Comments.

Each operation runs inside a Unit of Work, so that its writes become visible together,
or not at all.
"""

import functools
import logging

from blogapp import cascade
from blogapp.exceptions import InvalidReferenceError, ObjectNotFoundError
from blogapp.globals import current_domain
from blogapp.models import Comment, Post
from blogapp.unit_of_work import transaction

logger = logging.getLogger(__name__)


def use_case(func):
    """Decorator to run a function in a Unit of Work.

    The decorated function accepts an optional `timeout` keyword argument, in seconds,
    which bounds the Unit of Work.
    """

    @functools.wraps(func)
    def wrapper(*args, timeout: float = None, **kwargs):
        logger.info(f"Executing use case: {func.__name__}")

        with transaction(timeout=timeout):
            return func(*args, **kwargs)

    setattr(wrapper, "_use_case", True)
    return wrapper


@use_case
def create_post(title=None, body=None, published=False) -> Post:
    """Persist a new Post. The store assigns its identifier.

    Raises `ValidationError` when values cannot be loaded into a Post.
    """
    post = Post(title=title, body=body, published=published)
    return current_domain.repository_for(Post).add(post)


@use_case
def create_comment(post_id, body=None) -> Comment:
    """Persist a new Comment on an existing Post.

    Raises `InvalidReferenceError`, without writing anything, when `post_id` does not
    resolve to a Post.
    """
    comment = Comment(post_id=post_id, body=body)

    if not current_domain.repository_for(Post).exists(comment.post_id):
        raise InvalidReferenceError(
            {"post_id": [f"Post with identifier {comment.post_id} does not exist"]}
        )

    return current_domain.repository_for(Comment).add(comment)


def destroy_post(post_id, timeout: float = None) -> cascade.CascadeResult:
    """Destroy a Post along with all of its Comments. See :func:`cascade.destroy_post`."""
    logger.info("Executing use case: destroy_post")
    return cascade.destroy_post(post_id, timeout=timeout)


def get_post(post_id) -> Post:
    """Raises `ObjectNotFoundError` when there is no such Post"""
    return current_domain.repository_for(Post).get(post_id)


def list_posts() -> list[Post]:
    return current_domain.repository_for(Post).all()


def comments_of(post_id) -> list[Comment]:
    """Comments of a Post, oldest first.

    Raises `ObjectNotFoundError` when there is no such Post.
    """
    if not current_domain.repository_for(Post).exists(post_id):
        raise ObjectNotFoundError(
            f"`Post` object with identifier {post_id} does not exist.",
            extra_info={"entity": "Post", "id": post_id},
        )
    return current_domain.repository_for(Comment).comments_of(post_id)
