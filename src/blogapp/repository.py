from __future__ import annotations

import logging
from functools import cached_property
from typing import TYPE_CHECKING

from blogapp.entity import BaseEntity
from blogapp.exceptions import NotSupportedError
from blogapp.models import Comment, Post
from blogapp.port.dao import BaseDAO
from blogapp.port.provider import BaseProvider
from blogapp.unit_of_work import transaction

if TYPE_CHECKING:
    from blogapp.domain import Domain

logger = logging.getLogger(__name__)


class BaseRepository:
    """This is the baseclass for concrete Repository implementations.

    A Repository mimics a collection of entities, hiding the underlying store. Writes
    are performed on the session of the Unit of Work in progress and are committed
    with it. If there is no Unit of Work in progress, a new one is started and
    committed as soon as the operation completes.
    """

    #: Entity class whose records this repository manages
    entity_cls: type[BaseEntity] = None

    def __new__(cls, *args, **kwargs):
        # Prevent instantiation of `BaseRepository itself`
        if cls is BaseRepository:
            raise NotSupportedError("BaseRepository cannot be instantiated")
        return super().__new__(cls)

    def __init__(self, domain: Domain, provider: BaseProvider) -> None:
        self._domain = domain
        self._provider = provider

    @cached_property
    def _dao(self) -> BaseDAO:
        """Retrieve a DAO for the entity, bound to this repository's provider"""
        return self._provider.get_dao(self.entity_cls)

    def add(self, item: BaseEntity) -> BaseEntity:
        """Persist a new entity. The store assigns its identifier."""
        with transaction():
            self._dao.create(item)

        return item

    def remove(self, item: BaseEntity) -> BaseEntity:
        with transaction():
            self._dao.delete(item)

        return item

    def get(self, identifier) -> BaseEntity:
        """Fetch an entity by its identifier.

        Throws `ObjectNotFoundError` if there is no such entity.
        """
        return self._dao.get(identifier)

    def all(self) -> list[BaseEntity]:
        return list(self._dao.filter(order_by=("id",)))

    def exists(self, identifier) -> bool:
        return self._dao.exists(**{self.entity_cls.meta_.id_field.field_name: identifier})

    def count(self) -> int:
        return self._dao.count()


class PostRepository(BaseRepository):
    entity_cls = Post


class CommentRepository(BaseRepository):
    entity_cls = Comment

    def comments_of(self, post_id) -> list[Comment]:
        """All Comments owned by the Post, oldest first"""
        return list(self._dao.filter(order_by=("id",), post_id=post_id))

    def count_for(self, post_id) -> int:
        return self._dao.count(post_id=post_id)
