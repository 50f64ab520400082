"""
Schema definition for typed documents.

A schema is an ordered mapping of field name to one of three declared types:

- ``string``: free text, normalized, stemmed and indexed for fuzzy lookup
- ``number``: ints and floats (booleans are rejected), matched exactly
- ``boolean``: matched against the literal query words ``true`` / ``false``

The schema is immutable once the engine is built. Field weights are the only
mutable part of the model and live on ``Field`` objects owned by the engine.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Any

from memsearch.exceptions import ConfigurationError, ValidationError


logger = logging.getLogger(__name__)

DEFAULT_WEIGHT = 1.0


class FieldType(str, Enum):
    """Types of fields supported in the schema."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"

    def accepts(self, value: Any) -> bool:
        """Return True when ``value`` is an instance of this declared type."""
        if self is FieldType.STRING:
            return isinstance(value, str)
        if self is FieldType.NUMBER:
            # bool is a subclass of int but never a number here
            return isinstance(value, (int, float)) and not isinstance(value, bool)
        return isinstance(value, bool)


@dataclass
class Field:
    """
    A schema field together with its relevance weight.

    Weights are clamped into the engine's bounds whenever they are set, so a
    Field never carries an out-of-range weight.

    Args:
        name: Field name from the schema
        field_type: Declared field type
        weight: Relevance multiplier applied by the scorer (default: 1.0)
    """

    name: str
    field_type: FieldType
    weight: float = DEFAULT_WEIGHT

    def set_weight(self, weight: float, *, min_weight: float = 1.0, max_weight: float = 5.0) -> bool:
        """Set the weight, clamping it into ``[min_weight, max_weight]``.

        Returns:
            True when the stored weight changed value.
        """
        if weight > max_weight:
            logger.warning("Weight %s for field '%s' is too high, setting to %s", weight, self.name, max_weight)
            weight = max_weight
        elif weight < min_weight:
            logger.warning("Weight %s for field '%s' is too low, setting to %s", weight, self.name, min_weight)
            weight = min_weight

        changed = weight != self.weight
        self.weight = weight
        return changed


@dataclass(frozen=True)
class Schema:
    """
    Ordered, immutable mapping of field name to declared type.

    Example:
        schema = Schema.from_mapping({"title": "string", "year": "number"})
        schema.validate_document({"title": "Dune", "year": 1965})
    """

    types: Mapping[str, FieldType]
    _names: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "types", dict(self.types))
        object.__setattr__(self, "_names", tuple(self.types))

    def __getitem__(self, name: str) -> FieldType:
        """Get the declared type of a field."""
        return self.types[name]

    def __contains__(self, name: object) -> bool:
        return name in self.types

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    @property
    def names(self) -> tuple[str, ...]:
        return self._names

    @property
    def string_fields(self) -> tuple[str, ...]:
        """Return the names of all string fields in schema order."""
        return tuple(name for name in self._names if self.types[name] is FieldType.STRING)

    def create_fields(self) -> list[Field]:
        """Build one default-weight Field per schema key."""
        return [Field(name=name, field_type=self.types[name]) for name in self._names]

    def validate_document(self, document: Any) -> None:
        """Raise ValidationError unless every schema key is present with its declared type.

        Keys that are not part of the schema are tolerated.
        """
        if not isinstance(document, Mapping):
            msg = f"Document must be a mapping, got {type(document).__name__}"
            raise ValidationError(msg)
        for key in document:
            if not isinstance(key, str):
                msg = f"Document keys must be strings, got {key!r}"
                raise ValidationError(msg)
        for name in self._names:
            if name not in document:
                msg = f"Document does not match schema: missing field '{name}'"
                raise ValidationError(msg)
            field_type = self.types[name]
            if not field_type.accepts(document[name]):
                msg = (
                    f"Document does not match schema: field '{name}' expects {field_type.value}, "
                    f"got {type(document[name]).__name__}"
                )
                raise ValidationError(msg)

    def to_dict(self) -> dict[str, str]:
        """Serialize schema to a plain name -> type mapping."""
        return {name: self.types[name].value for name in self._names}

    @classmethod
    def from_mapping(cls, data: Any) -> Schema:
        """Build a schema from a name -> type-name mapping."""
        if not isinstance(data, Mapping):
            msg = f"Invalid configuration: schema must be a mapping, got {type(data).__name__}"
            raise ConfigurationError(msg)
        if not data:
            msg = "Invalid configuration: schema must declare at least one field"
            raise ConfigurationError(msg)

        types: dict[str, FieldType] = {}
        for name, type_name in data.items():
            if not isinstance(name, str) or not name:
                msg = f"Invalid configuration: field names must be non-empty strings, got {name!r}"
                raise ConfigurationError(msg)
            try:
                types[name] = FieldType(type_name)
            except ValueError:
                allowed = ", ".join(f"'{member.value}'" for member in FieldType)
                msg = f"Invalid configuration: field '{name}' has type {type_name!r}, expected one of {allowed}"
                raise ConfigurationError(msg) from None
        return cls(types=types)

    @classmethod
    def from_config(cls, config: Any) -> Schema:
        """Build a schema from an engine config of the form ``{"schema": {...}}``."""
        if not isinstance(config, Mapping) or set(config) != {"schema"}:
            msg = 'Invalid configuration: expected only a "schema" property.'
            raise ConfigurationError(msg)
        return cls.from_mapping(config["schema"])
