import logging
from abc import ABCMeta, abstractmethod
from typing import Any

from blogapp.entity import BaseEntity
from blogapp.exceptions import ObjectNotFoundError
from blogapp.globals import current_uow

logger = logging.getLogger(__name__)


class ResultSet(object):
    """This is an internal helper class returned by DAO query operations.

    The purpose of this class is to prevent DAO-specific data structures from leaking into the domain layer.
    It can help check whether results exist, and traverse the results.
    """

    def __init__(self, items: list):
        # the matching items
        self.items = items

    def __bool__(self):
        """Returns `True` when the resultset is not empty"""
        return bool(self.items)

    def __iter__(self):
        """Returns an iterable on items, to support traversal"""
        return iter(self.items)

    def __len__(self):
        """Returns number of items in the resultset"""
        return len(self.items)


class BaseDAO(metaclass=ABCMeta):
    """This is the baseclass for concrete DAO implementations.

    One part of this base class contains abstract methods to be overridden and implemented in each
    concrete database implementation. These methods are where the actual interaction with the database
    takes place. The other part contains fully-implemented object lifecycle methods that invoke the
    concrete methods, and handle casting of records to domain entity objects and vice versa.

    :param domain: the domain of the application this DAO is associated with.
    :param provider: the provider object of the database implementation, from whom the DAO can
                     request and fetch sessions and connections.
    :param entity_cls: the domain entity class associated with the DAO.
    """

    def __init__(self, domain, provider, entity_cls):
        #: Holds a reference to the domain to which the DAO belongs to.
        self.domain = domain

        #: Holds a reference to the provider which supplies the DAO with live connections.
        self.provider = provider

        #: Holds a reference to the entity class associated with this DAO.
        self.entity_cls = entity_cls

        #: The actual table or collection name associated with the DAO.
        self.schema_name = entity_cls.meta_.schema_name

    def __repr__(self) -> str:
        return f"{self.__class__.__name__} <{self.entity_cls.__name__}>"

    def _get_session(self):
        """Returns an active connection to the persistence store.

        - If there is an active Unit of Work, the session associated with it is returned.
          The Unit of Work verifies that its deadline has not passed before handing it out.
        - Otherwise, a new read-only connection is retrieved from the provider.
        """
        if current_uow and current_uow.in_progress:
            return current_uow.get_session(self.provider.name)
        else:
            return self.provider.get_connection()

    def _to_record(self, entity_obj: BaseEntity) -> dict:
        return {
            field_name: getattr(entity_obj, field_name)
            for field_name in self.entity_cls.meta_.declared_fields
        }

    def _to_entity(self, record: dict) -> BaseEntity:
        entity_obj = self.entity_cls(**record)
        entity_obj.state_.mark_retrieved()
        return entity_obj

    ###############################
    # Repository-specific methods #
    ###############################

    @abstractmethod
    def _filter(self, criteria: dict, order_by: tuple = ()) -> list[dict]:
        """Return records from the data store whose attributes equal all values in `criteria`."""

    @abstractmethod
    def _count(self, criteria: dict) -> int:
        """Return the number of records matching `criteria`."""

    @abstractmethod
    def _create(self, record: dict) -> dict:
        """Persist a new record into the data store.

        The store assigns the identifier. Returns the persisted record, with identifier.
        """

    @abstractmethod
    def _delete(self, identifier: Any) -> None:
        """Delete a record by its identifier.

        Throws `ObjectNotFoundError` if the record does not exist.
        """

    ######################
    # Life-cycle methods #
    ######################

    def get(self, identifier: Any) -> BaseEntity:
        """Retrieve a specific Record from the store by its `identifier`.

        Throws `ObjectNotFoundError` if no record was found for the identifier.
        """
        logger.debug(
            f"Lookup `{self.entity_cls.__name__}` object with identifier {identifier}"
        )

        filters = {self.entity_cls.meta_.id_field.field_name: identifier}
        records = self._filter(filters)
        if not records:
            raise ObjectNotFoundError(
                f"`{self.entity_cls.__name__}` object with identifier {identifier} "
                f"does not exist.",
                extra_info={"entity": self.entity_cls.__name__, "id": identifier},
            )

        return self._to_entity(records[0])

    def filter(self, order_by: tuple = (), **criteria) -> ResultSet:
        """Return entities whose attributes match all `criteria`"""
        items = [self._to_entity(record) for record in self._filter(criteria, order_by)]
        return ResultSet(items)

    def exists(self, **criteria) -> bool:
        return self._count(criteria) > 0

    def count(self, **criteria) -> int:
        return self._count(criteria)

    def create(self, entity_obj: BaseEntity) -> BaseEntity:
        """Persist a new entity and set the store-assigned identifier on it.

        Returns the same entity object, marked as persisted.
        """
        logger.debug(f"Creating new `{self.entity_cls.__name__}` object")

        try:
            record = self._create(self._to_record(entity_obj))

            id_field_name = self.entity_cls.meta_.id_field.field_name
            setattr(entity_obj, id_field_name, record[id_field_name])

            entity_obj.state_.mark_saved()
            return entity_obj
        except Exception as exc:
            logger.error(f"Failed creating entity because of {exc}")
            raise

    def delete(self, entity_obj: BaseEntity) -> BaseEntity:
        """Delete a record in the data store.

        Throws `ObjectNotFoundError` if the object was not found in the data store.
        """
        try:
            if not entity_obj.state_.is_destroyed:
                self._delete(entity_obj.identity)

                # Let everybody know the object is no longer referable
                entity_obj.state_.mark_destroyed()

            return entity_obj
        except Exception as exc:
            logger.error(f"Failed entity deletion because of {exc}")
            raise
