import logging
import time
from contextlib import contextmanager

from blogapp.exceptions import (
    InvalidOperationError,
    StoreError,
    StoreTimeoutError,
    TransactionError,
)
from blogapp.globals import _uow_context_stack, current_domain, current_uow

logger = logging.getLogger(__name__)


class UnitOfWork:
    """A transaction spanning one or more store sessions.

    Sessions are opened lazily, the first time a DAO asks for one, and are all
    committed or all rolled back together.

    :param timeout: seconds the unit of work may take, from `start` until `commit`.
        Every session handed out checks the deadline, and an expired deadline raises
        `StoreTimeoutError`. `None` falls back to the domain's `default_timeout`.
    """

    def __init__(self, timeout: float = None):
        self.domain = current_domain
        self._in_progress = False

        if timeout is None:
            timeout = self.domain.config.get("default_timeout")
        self.timeout = timeout
        self._deadline = None

        self._sessions = {}

    @property
    def in_progress(self):
        return self._in_progress

    def __enter__(self):
        # Initiate a new session as part of self
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:  # something blew up inside the block
            if self._in_progress:
                self.rollback()
            return False  # re-raise the original exception

        self.commit()

    def __repr__(self):
        return f"<UnitOfWork: {list(self._sessions)} in_progress={self._in_progress}>"

    def start(self):
        # Stand in method for `__enter__`
        #   To explicitly begin and end transactions
        self._in_progress = True
        if self.timeout is not None:
            self._deadline = time.monotonic() + self.timeout
        _uow_context_stack.push(self)

    def remaining(self):
        """Seconds left before the deadline, or `None` when there is no deadline"""
        if self._deadline is None:
            return None
        return max(self._deadline - time.monotonic(), 0.0)

    def check_deadline(self):
        if self._deadline is not None and time.monotonic() > self._deadline:
            raise StoreTimeoutError(
                f"Unit of Work exceeded its timeout of {self.timeout}s",
                extra_info={"timeout": self.timeout},
            )

    def commit(self):
        # Raise error if the Unit Of Work is not active
        logger.debug(f"Committing {self}...")
        if not self._in_progress:
            raise InvalidOperationError("UnitOfWork is not in progress")

        try:
            self.check_deadline()
        except StoreTimeoutError:
            self.rollback()
            raise

        # Exit from Unit of Work
        # This ensures that further operations are not considered part of this transaction
        _uow_context_stack.pop()

        try:
            for session in self._sessions.values():
                session.commit()

            logger.debug("Commit Successful")
        except StoreError:
            self._rollback_sessions()
            raise
        except Exception as exc:
            logger.error(
                f"Error during Commit: {str(exc)}. Rolling back Transaction..."
            )
            self._rollback_sessions()
            raise TransactionError(
                f"Unit of Work commit failed: {str(exc)}",
                extra_info={
                    "original_exception": exc.__class__.__name__,
                    "original_message": str(exc),
                    "sessions": list(self._sessions.keys()),
                },
            ) from exc
        finally:
            self._reset()

    def _rollback_sessions(self):
        for session in self._sessions.values():
            try:
                session.rollback()
            except Exception as exc:
                logger.error(f"Error during Transaction rollback: {str(exc)}")

    def _reset(self):
        # Close all sessions
        for session in self._sessions.values():
            session.close()

        self._sessions = {}
        self._deadline = None
        self._in_progress = False

    def rollback(self):
        # Raise error if the Unit Of Work is not active
        if not self._in_progress:
            raise InvalidOperationError("UnitOfWork is not in progress")

        # Exit from Unit of Work
        _uow_context_stack.pop()

        self._rollback_sessions()
        logger.debug("Transaction rolled back")

        self._reset()

    def get_session(self, provider_name):
        """Get session for provider, initializing one if it doesn't exist"""
        self.check_deadline()

        if provider_name not in self._sessions:
            provider = self.domain.providers[provider_name]
            self._sessions[provider_name] = provider.get_session(
                timeout=self.remaining()
            )

        return self._sessions[provider_name]


@contextmanager
def transaction(timeout: float = None):
    """Join the Unit of Work in progress, or run the block in a new one.

    A new Unit of Work is committed when the block completes, and rolled back if
    the block raises. A joined Unit of Work is left for its owner to finish.
    """
    if current_uow and current_uow.in_progress:
        yield current_uow._get_current_object()
        return

    with UnitOfWork(timeout=timeout) as uow:
        yield uow
