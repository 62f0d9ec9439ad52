"""Implementation of a dictionary based store"""

import copy
import logging
from collections import defaultdict
from itertools import count
from operator import itemgetter
from threading import Lock

from blogapp.exceptions import ObjectNotFoundError, StoreTimeoutError
from blogapp.port.dao import BaseDAO
from blogapp.port.provider import BaseProvider

logger = logging.getLogger(__name__)


class MemorySession:
    """A transaction against the in-memory store.

    A session works on a private copy of the committed data. Writers are serialized by
    the provider's transaction lock, held from the moment the session opens until it
    is closed. Commit publishes the copy by swapping a single reference, so readers
    always see either the state before or the state after a transaction.
    """

    def __init__(self, provider, timeout=None):
        self._provider = provider
        self.is_active = True

        acquired = provider._transaction_lock.acquire(
            timeout=-1 if timeout is None else timeout
        )
        if not acquired:
            raise StoreTimeoutError(
                f"Timed out waiting for a transaction on `{provider.name}`",
                extra_info={"provider": provider.name, "timeout": timeout},
            )

        self._db = copy.deepcopy(provider._databases)

    @property
    def data(self):
        return self._db

    def next_identifier(self, schema_name):
        # Counters start from 1, and are never rolled back, like database sequences
        return next(self._provider._counters[schema_name]) + 1

    def commit(self):
        if self.is_active:
            self._provider._databases = self._db

    def rollback(self):
        self._db = None

    def close(self):
        if self.is_active:
            self.is_active = False
            self._provider._transaction_lock.release()


class MemoryConnection:
    """Read-only view of the committed data"""

    def __init__(self, provider):
        self._db = provider._databases

    @property
    def data(self):
        return self._db


class MemoryProvider(BaseProvider):
    """Provider class for Dict Repositories"""

    __database__ = "memory"

    def __init__(self, name, domain, conn_info: dict):
        super().__init__(name, domain, conn_info)

        # Committed state of the store: {schema_name: {identifier: record}}
        self._databases = defaultdict(dict)
        self._counters = defaultdict(count)
        self._transaction_lock = Lock()

    def get_session(self, timeout=None):
        """Return a session object

        For the memory store, a session translates to a copy of the `database`.
        All changes are made on this copy, and published when the session commits.
        """
        return MemorySession(self, timeout=timeout)

    def get_connection(self):
        """Return a view of the committed database object"""
        return MemoryConnection(self)

    def is_alive(self) -> bool:
        """Check if the connection is alive"""
        return True

    def get_dao(self, entity_cls):
        return DictDAO(self.domain, self, entity_cls)

    def _data_reset(self):
        """Reset data"""
        self._databases = defaultdict(dict)
        self._counters = defaultdict(count)

    def _create_database_artifacts(self):
        """Dummy placeholder. Nothing to do."""

    def _drop_database_artifacts(self):
        """Dummy placeholder. Nothing to do."""


class DictDAO(BaseDAO):
    """A DAO for storing data in a dictionary"""

    def _table(self, session):
        return session.data[self.schema_name]

    @staticmethod
    def _matches(record, criteria):
        return all(record.get(key) == value for key, value in criteria.items())

    def _filter(self, criteria, order_by=()):
        conn = self._get_session()

        items = [
            dict(record)
            for record in conn.data.get(self.schema_name, {}).values()
            if self._matches(record, criteria)
        ]

        # Records are returned in insertion order unless ordered otherwise
        for o_key in reversed(order_by):
            reverse = o_key.startswith("-")
            o_key = o_key.lstrip("-")
            items = sorted(items, key=itemgetter(o_key), reverse=reverse)

        return items

    def _count(self, criteria):
        return len(self._filter(criteria))

    def _create(self, record):
        session = self._get_session()

        id_field_name = self.entity_cls.meta_.id_field.field_name
        record = dict(record)
        record[id_field_name] = session.next_identifier(self.schema_name)

        self._table(session)[record[id_field_name]] = record
        return record

    def _delete(self, identifier):
        session = self._get_session()

        table = self._table(session)
        if identifier not in table:
            raise ObjectNotFoundError(
                f"`{self.entity_cls.__name__}` object with identifier {identifier} "
                f"does not exist."
            )

        del table[identifier]
