"""
Custom BlogApp exception classes
"""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


class BlogAppException(Exception):
    """Base class for all Exceptions raised within BlogApp"""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args)

        self.extra_info = kwargs.get("extra_info", None)

    def __reduce__(self) -> tuple[Any, tuple[Any]]:
        return (self.__class__, (self.args[0],))


class BlogAppExceptionWithMessage(BlogAppException):
    def __init__(
        self, messages: dict[str, list], traceback: Optional[str] = None, **kwargs: Any
    ) -> None:
        logger.debug(f"Exception:: {messages}")

        self.messages = messages
        self.traceback = traceback

        super().__init__(**kwargs)

    def __str__(self) -> str:
        return f"{dict(self.messages)}"

    def __reduce__(self) -> tuple[Any, tuple[Any]]:
        return (self.__class__, (self.messages,))


class ConfigurationError(BlogAppException):
    """Improper Configuration encountered like:
    * A `default` database is missing
    * An unknown database provider is configured
    * A configuration file could not be found
    """


class ObjectNotFoundError(BlogAppException):
    """Object was not found, can raise 404"""


class InvalidOperationError(BlogAppException):
    """Operation being performed is not permitted"""


class NotSupportedError(BlogAppException):
    """Object does not support the operation being performed"""


class ValidationError(BlogAppExceptionWithMessage):
    """Raised when validation fails on a field or a request payload.

    :param messages: A dictionary of error messages where key is the field name
        and value is a list of errors
    """


class InvalidReferenceError(BlogAppExceptionWithMessage):
    """A reference points to a record that does not exist, like a Comment
    whose `post_id` does not resolve to a Post."""


class StoreError(BlogAppException):
    """The persistence store is unreachable, or a read/write failed"""


class StoreTimeoutError(StoreError):
    """A store operation did not complete within the allotted time.

    Callers may retry the operation."""


class TransactionError(StoreError):
    """Raised when a Unit of Work fails to commit"""


class CascadeError(StoreError):
    """Raised when a Post could not be destroyed along with its Comments.

    The transaction has been rolled back when this is raised."""


class IncorrectUsageError(BlogAppException):
    """Usage of a BlogApp element violates its contract, like registering a
    repository for the wrong entity"""
