"""The Domain object, the central registry of a BlogApp application"""

import logging

from blogapp.adapters import Providers
from blogapp.config import Config
from blogapp.exceptions import ConfigurationError, IncorrectUsageError
from blogapp.globals import _domain_context_stack
from blogapp.models import Comment, Post
from blogapp.repository import BaseRepository, CommentRepository, PostRepository

logger = logging.getLogger(__name__)


class DomainContext:
    """The domain context binds a domain object implicitly to the current thread
    or coroutine. Contexts can be nested; each push must be matched with a pop.
    """

    def __init__(self, domain):
        self.domain = domain

    def push(self):
        """Binds the domain context to the current context."""
        _domain_context_stack.push(self)

    def pop(self):
        """Pops the domain context."""
        rv = _domain_context_stack.pop()
        assert rv is self, "Popped wrong domain context.  (%r instead of %r)" % (
            rv,
            self,
        )

    def __enter__(self):
        self.push()
        return self

    def __exit__(self, exc_type, exc_value, tb):
        self.pop()


class Domain:
    """The domain object holds configuration, database providers and the repositories
    of all registered entities.

    Usually it is created once, in the main module of the application::

        domain = Domain(__name__, config={"databases": {...}})

        with domain.domain_context():
            post = create_post(title="Hello World", body="...", published=True)

    :param name: the name of the domain, typically the name of the module creating it.
    :param config: a configuration dictionary, merged over the defaults.
    """

    def __init__(self, name: str = None, config: dict = None):
        self.name = name or __name__
        self.config = Config.load_from_dict(config)
        self.providers = Providers(self)

        # entity class -> repository class
        self.registry = {}

        self.register(Post, PostRepository)
        self.register(Comment, CommentRepository)

    @classmethod
    def from_path(cls, path: str, name: str = None):
        """Construct a domain from the configuration file found at `path`"""
        return cls(name or path, config=Config.load_from_path(path))

    def __repr__(self):
        return f"<Domain: {self.name}>"

    def register(self, entity_cls, repository_cls):
        if not (
            isinstance(repository_cls, type)
            and issubclass(repository_cls, BaseRepository)
        ):
            raise IncorrectUsageError(
                f"`{repository_cls!r}` is not a Repository class"
            )
        if repository_cls.entity_cls is not entity_cls:
            raise IncorrectUsageError(
                f"Repository `{repository_cls.__name__}` is not associated with "
                f"`{entity_cls.__name__}`"
            )

        self.registry[entity_cls] = repository_cls

    def domain_context(self):
        """Create a :class:`DomainContext`. Use as a ``with`` block to push the
        context, which will make :data:`current_domain` point at this domain.
        """
        return DomainContext(self)

    def repository_for(self, entity_cls) -> BaseRepository:
        """Retrieve the Repository registered for an entity, bound to its provider"""
        try:
            repository_cls = self.registry[entity_cls]
        except KeyError:
            raise ConfigurationError(
                f"`{entity_cls.__name__}` is not registered with {self}"
            )

        provider = self.providers[entity_cls.meta_.provider]
        return repository_cls(self, provider)

    def reinitialize(self):
        """Rebuild providers after configuration changes"""
        self.providers.reset()

    def setup_database(self):
        for provider in self.providers.values():
            provider._create_database_artifacts()
            logger.info(f"Created database artifacts of `{provider.name}`")

    def drop_database(self):
        for provider in self.providers.values():
            provider._drop_database_artifacts()
            logger.info(f"Dropped database artifacts of `{provider.name}`")

    def reset_data(self):
        for provider in self.providers.values():
            provider._data_reset()
