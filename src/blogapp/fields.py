"""Module for defining the Field types of BlogApp entities"""

from abc import ABCMeta, abstractmethod
from collections import defaultdict
from typing import Any, Callable, Iterable, List

import bleach

from blogapp.exceptions import InvalidOperationError, ValidationError

MISSING_ERROR_MESSAGE = (
    "ValidationError raised by `{class_name}`, but error key `{key}` does "
    "not exist in the `error_messages` dictionary."
)


class Field(metaclass=ABCMeta):
    """
    Base class for all fields of an entity.

    Fields are descriptors. When a field is assigned to a class, it is given a name
    on the class, which is used to access the field value from the instance.

    The values are validated and converted to the appropriate type when they are set
    on the instance, by the `_load` method. The values live in the `__dict__` of the
    instance, so they are NEVER stored on the field itself.

    Parameters:
    - `identifier`: A boolean indicating if this field is the identifier for the entity.
    - `default`: The default value for the field.
    - `required`: A boolean indicating if this field is required.
    - `validators`: A list of callables that validate the field value.
    - `error_messages`: A dictionary of error messages for validation errors.
    """

    default_error_messages = {
        "invalid": "Value is not a valid type for this field.",
        "required": "is required",
    }

    # Default validators for a Field
    default_validators: List[Callable] = []

    # These values will trigger the self.required check.
    empty_values: tuple = (None, "", [], (), {})

    def __init__(
        self,
        identifier: bool = False,
        default: Any = None,
        required: bool = False,
        validators: Iterable = (),
        error_messages: dict = None,
    ):
        self.field_name = None
        self.identifier = identifier
        self.default = default

        # Indicates if this field is required, always True for identifier field
        self.required = True if self.identifier else required

        self._validators = validators

        # Collect default error message from self and parent classes
        messages = {}
        for cls in reversed(self.__class__.__mro__):
            messages.update(getattr(cls, "default_error_messages", {}))
        messages.update(error_messages or {})
        self.error_messages = messages

    def __set_name__(self, entity_cls, name):
        self.field_name = name

    def __repr__(self):
        values = []
        if self.identifier:
            values.append("identifier=True")
        if not self.identifier and self.required:
            values.append("required=True")
        if self.default is not None:
            values.append(f"default={self.default!r}")
        return f"{self.__class__.__name__}(" + ", ".join(values) + ")"

    def __get__(self, instance, owner):
        if instance is None:
            return self
        return instance.__dict__.get(self.field_name)

    def __set__(self, instance, value):
        value = self._load(value)
        instance.__dict__[self.field_name] = value

    def fail(self, key, **kwargs):
        """A helper method that simply raises a `ValidationError`."""
        try:
            msg = self.error_messages[key]
        except KeyError:
            class_name = self.__class__.__name__
            msg = MISSING_ERROR_MESSAGE.format(class_name=class_name, key=key)
            raise ValidationError({key: [msg]})

        # Format message with supplied arguments
        msg = msg.format(**kwargs)

        # If a field is being used by itself (not owned by an entity),
        #   its field_name will be blank.
        field_name = self.field_name or "unlinked"
        raise ValidationError({field_name: [msg]})

    @property
    def validators(self):
        return [*self.default_validators, *self._validators]

    @abstractmethod
    def _cast_to_type(self, value: Any) -> Any:
        """Validate and convert the value passed to native type.
        Raise a :exc:`ValidationError` if validation does not succeed.
        """

    def as_dict(self, value: Any) -> Any:
        """Return JSON-compatible value of field"""
        return value

    def _run_validators(self, value):
        if value in self.empty_values:
            return

        errors = defaultdict(list)
        for validator in self.validators:
            try:
                validator(value)
            except ValidationError as err:
                field_name = self.field_name or "unlinked"
                for messages in err.messages.values():
                    errors[field_name].extend(messages)

        if errors:
            raise ValidationError(errors)

    def _load(self, value: Any):
        """Load the value for the field, run validators and return the value."""
        if value in self.empty_values:
            # If a default has been set for the field return it
            if self.default is not None:
                default = self.default
                return default() if callable(default) else default

            elif self.required:
                self.fail("required")

            # Empty values are preserved as-is, without running validations
            return value

        # Cast and Validate the value for this Field
        value = self._cast_to_type(value)

        self._run_validators(value)

        return value


class MaxLengthValidator:
    """Validate that a string does not exceed `limit_value` characters"""

    def __init__(self, limit_value):
        self.limit_value = limit_value

    def __call__(self, value):
        if self.limit_value is not None and len(value) > self.limit_value:
            raise ValidationError(
                {
                    "max_length": [
                        f"value has more than {self.limit_value} characters"
                    ]
                }
            )


class String(Field):
    """Concrete field implementation for short strings, like titles.

    :param max_length: The maximum allowed length for the field.
    :param sanitize: Escape HTML in values with `bleach`.
    """

    default_error_messages = {
        "invalid": '"{value}" value must be a string.',
    }

    def __init__(self, max_length=255, sanitize=True, **kwargs):
        self.max_length = max_length
        self.sanitize = sanitize
        self.default_validators = [MaxLengthValidator(self.max_length)]
        super().__init__(**kwargs)

    def _cast_to_type(self, value):
        """Convert the value to its string representation"""
        if isinstance(value, (dict, list, tuple, set)):
            self.fail("invalid", value=value)

        value = value if isinstance(value, str) else str(value)

        return bleach.clean(value) if self.sanitize else value


class Text(String):
    """Concrete field implementation for unbounded text, like a post's body."""

    def __init__(self, sanitize=True, **kwargs):
        super().__init__(max_length=None, sanitize=sanitize, **kwargs)


class Boolean(Field):
    """Concrete field implementation for the Boolean type."""

    default_error_messages = {
        "invalid": '"{value}" value must be either True or False.',
    }

    def _cast_to_type(self, value):
        """Convert the value to a boolean and raise error on failures"""
        if value in (True, False):
            return bool(value)
        if value in ("t", "true", "True", "1"):
            return True
        if value in ("f", "false", "False", "0"):
            return False
        self.fail("invalid", value=value)


class Auto(Field):
    """
    Auto Field represents a store-assigned identifier.

    Values are generated by the persistence store on creation. Once assigned, an
    identifier cannot be changed.
    """

    default_error_messages = {
        "invalid": '"{value}" value must be an integer.',
    }

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        # Values are supplied by the store, so they cannot be required up front
        self.required = False

    def __set__(self, instance, value):
        existing_value = instance.__dict__.get(self.field_name)
        if existing_value is not None and value != existing_value:
            raise InvalidOperationError("Identifiers cannot be changed once set")

        instance.__dict__[self.field_name] = self._load(value)

    def _cast_to_type(self, value):
        try:
            return int(value)
        except (TypeError, ValueError):
            self.fail("invalid", value=value)


class Reference(Field):
    """Holds the identifier of a record of another entity (a foreign key).

    Only the key is stored. The referenced record is never embedded, so there
    are no cyclic object graphs between parents and children.
    """

    default_error_messages = {
        "invalid": '"{value}" is not a valid identifier.',
    }

    def __init__(self, to_cls, **kwargs):
        self.to_cls = to_cls
        super().__init__(**kwargs)

    def __repr__(self):
        return f"{self.__class__.__name__}({self.to_cls.__name__})"

    def _cast_to_type(self, value):
        if isinstance(value, bool):
            self.fail("invalid", value=value)

        try:
            return int(value)
        except (TypeError, ValueError):
            self.fail("invalid", value=value)
