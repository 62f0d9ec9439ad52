__version__ = "0.1.0"

from .cascade import CascadeResult
from .domain import Domain
from .globals import current_domain, current_uow
from .models import Comment, Post
from .services import (
    create_comment,
    create_post,
    destroy_post,
    use_case,
)
from .unit_of_work import UnitOfWork, transaction

__all__ = [
    "CascadeResult",
    "Comment",
    "create_comment",
    "create_post",
    "current_domain",
    "current_uow",
    "destroy_post",
    "Domain",
    "Post",
    "transaction",
    "UnitOfWork",
    "use_case",
]
