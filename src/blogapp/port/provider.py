"""Base class for Providers"""

from abc import ABCMeta, abstractmethod


class BaseProvider(metaclass=ABCMeta):
    """Provider Implementation for each database that acts as a gateway to configure the database,
    retrieve connections and perform commits
    """

    #: Name of the database technology, like `memory` or `sqlite`
    __database__ = None

    def __init__(self, name, domain, conn_info: dict):
        """Initialize Provider with Connection/Adapter details"""
        self.name = name
        self.domain = domain
        self.conn_info = conn_info

    @abstractmethod
    def get_session(self, timeout: float = None):
        """Establish a new transactional session with the database.

        The session scope and the transaction scope match: a new session is created when
        a Unit of Work begins and is closed when the Unit of Work commits or rolls back.

        `timeout` is the number of seconds the session may wait to acquire the store.
        """

    @abstractmethod
    def get_connection(self):
        """Get a connection for reading committed data outside of a transaction"""

    @abstractmethod
    def is_alive(self) -> bool:
        """Check if the connection is alive"""

    @abstractmethod
    def get_dao(self, entity_cls):
        """Return a DAO object for the entity class"""

    @abstractmethod
    def _create_database_artifacts(self):
        """Create tables, if the store needs them"""

    @abstractmethod
    def _drop_database_artifacts(self):
        """Drop tables, if the store has them"""

    @abstractmethod
    def _data_reset(self):
        """Remove all data, leaving the structures in place"""
