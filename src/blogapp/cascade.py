"""Destroying a Post together with the Comments it owns"""

import logging
from dataclasses import dataclass

from blogapp.exceptions import CascadeError, ObjectNotFoundError, StoreTimeoutError
from blogapp.globals import current_domain
from blogapp.models import Comment, Post
from blogapp.unit_of_work import transaction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CascadeResult:
    post_id: int
    comments_removed: int


def cascade_failure(post_id, exc) -> CascadeError:
    logger.error(f"Destroying Post {post_id} failed and was rolled back: {exc}")
    return CascadeError(
        f"Post {post_id} could not be destroyed",
        extra_info={
            "post_id": post_id,
            "original_exception": exc.__class__.__name__,
            "original_message": str(exc),
        },
    )


def destroy_post(post_id, timeout: float = None) -> CascadeResult:
    """Remove a Post and every Comment referencing it, in one transaction.

    Comments are deleted before the Post, so that foreign key constraints of the store
    hold at every step. Either all rows are removed or, if any deletion fails, none are:
    the transaction is rolled back and a single `CascadeError` is raised.

    Raises `ObjectNotFoundError` if the Post does not exist, and `StoreTimeoutError` if
    the transaction runs past `timeout` seconds. A row that disappears while it is
    being deleted is a `CascadeError`.
    """
    post_repo = current_domain.repository_for(Post)
    comment_repo = current_domain.repository_for(Comment)

    try:
        with transaction(timeout=timeout):
            post = post_repo.get(post_id)
            comments = comment_repo.comments_of(post.id)

            try:
                for comment in comments:
                    comment_repo.remove(comment)

                post_repo.remove(post)
            except StoreTimeoutError:
                raise
            except Exception as exc:
                raise cascade_failure(post_id, exc) from exc
    except (ObjectNotFoundError, StoreTimeoutError, CascadeError):
        raise
    except Exception as exc:
        raise cascade_failure(post_id, exc) from exc

    logger.info(f"Destroyed Post {post_id} with {len(comments)} comment(s)")
    return CascadeResult(post_id=post.id, comments_removed=len(comments))
