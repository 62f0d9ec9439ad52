"""Entity Functionality and Classes"""

import logging
from collections import defaultdict

import inflection

from blogapp.exceptions import NotSupportedError, ValidationError
from blogapp.fields import Auto, Field, Reference

logger = logging.getLogger(__name__)


class _EntityState:
    """Store entity instance state."""

    def __init__(self):
        self._new = True
        self._destroyed = False

    @property
    def is_new(self):
        return self._new

    @property
    def is_persisted(self):
        return not self._new

    @property
    def is_destroyed(self):
        return self._destroyed

    def mark_saved(self):
        self._new = False

    mark_retrieved = mark_saved

    def mark_destroyed(self):
        self._destroyed = True


class Options:
    """Metadata of an entity class, available as `meta_`"""

    def __init__(self, entity_cls):
        self.declared_fields = {
            name: attr
            for klass in reversed(entity_cls.__mro__)
            for name, attr in vars(klass).items()
            if isinstance(attr, Field)
        }

        id_fields = [
            field_obj
            for field_obj in self.declared_fields.values()
            if field_obj.identifier
        ]
        self.id_field = id_fields[0] if id_fields else None

        meta = getattr(entity_cls, "Meta", None)
        self.schema_name = getattr(
            meta, "schema_name", inflection.tableize(entity_cls.__name__)
        )
        self.provider = getattr(meta, "provider", "default")

    @property
    def reference_fields(self):
        return {
            name: field_obj
            for name, field_obj in self.declared_fields.items()
            if isinstance(field_obj, Reference)
        }


class BaseEntity:
    """The Base class for BlogApp entities.

    Entities declare their attributes as fields::

        class Post(BaseEntity):
            id = Auto(identifier=True)
            title = String(max_length=255)
            published = Boolean(default=False)

    The identifier field is an `Auto` field whose value is assigned by the persistence
    store when the entity is first saved. Entities can be initialized from keyword
    arguments or from dictionaries (templates)::

        post1 = Post({'title': 'Hello World'})

        post2 = Post(title='Hello World')
    """

    def __init_subclass__(subclass) -> None:
        super().__init_subclass__()

        subclass.meta_ = Options(subclass)

    def __init__(self, *template, **kwargs):
        if type(self) is BaseEntity:
            raise NotSupportedError("BaseEntity cannot be instantiated")

        self.errors = defaultdict(list)

        # Set up the storage for instance state
        self.state_ = _EntityState()

        supplied_values = {}
        for dictionary in template:
            if not isinstance(dictionary, dict):
                raise AssertionError(
                    f"Positional argument {dictionary} passed must be a dict. "
                    f"This argument serves as a template for loading common "
                    f"values.",
                )
            supplied_values.update(dictionary)
        supplied_values.update(kwargs)

        for field_name, value in supplied_values.items():
            if field_name not in self.meta_.declared_fields:
                self.errors[field_name].append("is not a recognized attribute")
                continue

            try:
                setattr(self, field_name, value)
            except ValidationError as err:
                for error_field, messages in err.messages.items():
                    self.errors[error_field].extend(messages)

        # Load defaults and run `required` checks on attributes that were not supplied
        for field_name, field_obj in self.meta_.declared_fields.items():
            if field_name in supplied_values or isinstance(field_obj, Auto):
                continue

            try:
                setattr(self, field_name, None)
            except ValidationError as err:
                for error_field, messages in err.messages.items():
                    self.errors[error_field].extend(messages)

        if self.errors:
            logger.debug(f"Errors in {self.__class__.__name__}: {dict(self.errors)}")
            raise ValidationError(dict(self.errors))

    def __eq__(self, other):
        """Equivalence check to be based only on Identity"""
        if type(other) is not type(self):
            return False

        return self.identity is not None and self.identity == other.identity

    def __hash__(self):
        return hash((type(self).__name__, self.identity))

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self}>"

    def __str__(self):
        return f"{self.__class__.__name__} object ({self.identity})"

    @property
    def identity(self):
        return getattr(self, self.meta_.id_field.field_name)

    def to_dict(self):
        """Return entity data as a dictionary"""
        return {
            field_name: field_obj.as_dict(getattr(self, field_name))
            for field_name, field_obj in self.meta_.declared_fields.items()
        }
