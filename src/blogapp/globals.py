from __future__ import annotations

import warnings
from typing import TYPE_CHECKING, Any

from werkzeug.local import LocalProxy, LocalStack

if TYPE_CHECKING:
    from blogapp.domain import Domain
    from blogapp.unit_of_work import UnitOfWork

_domain_ctx_err_msg = """\
Working outside of domain context.
This typically means that you attempted to use functionality that needed
to interface with the current domain object in some way. To solve
this, set up a domain context with domain.domain_context().\
"""


def _find_domain() -> Domain | None:
    top = _domain_context_stack.top
    if top is None:
        warnings.warn(
            _domain_ctx_err_msg,
            stacklevel=3,
        )
        return None
    return top.domain


def _find_uow() -> UnitOfWork | None:
    return _uow_context_stack.top


def has_domain_context() -> bool:
    """Return `True` when a domain context has been pushed in the current context"""
    return _domain_context_stack.top is not None


# context locals
_domain_context_stack: LocalStack[Any] = LocalStack()
_uow_context_stack: LocalStack[Any] = LocalStack()
current_domain: Domain = LocalProxy(_find_domain)  # type: ignore
current_uow: UnitOfWork = LocalProxy(_find_uow)  # type: ignore
