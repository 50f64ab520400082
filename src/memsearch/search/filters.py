"""Structured filters applied around scoring.

``where`` clauses narrow the candidate documents before scoring. They are
compiled against the schema first so that every error surfaces before the
engine touches any state.

``score`` conditions filter an already ranked hit list and are exposed as
the standalone ``filter_hits_by_score`` utility.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
import operator
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from memsearch.domain.search import ScoreConditions, SearchHit
from memsearch.exceptions import ParameterError, TypeMismatchError
from memsearch.search.schema import FieldType, Schema


WHERE_CONDITION_KEYS: tuple[str, ...] = ("lt", "lte", "gt", "gte", "bt", "eq", "inc")
SCORE_CONDITION_KEYS: tuple[str, ...] = ("gt", "lt", "eq")

_RANGE_KEYS = frozenset({"lt", "lte", "gt", "gte"})

_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "lt": operator.lt,
    "lte": operator.le,
    "gt": operator.gt,
    "gte": operator.ge,
    "eq": operator.eq,
    "inc": lambda value, operand: operand in value,
    "bt": lambda value, operand: operand[0] <= value <= operand[1],
}


@dataclass(frozen=True)
class FieldCondition:
    """A single compiled ``where`` condition on one field."""

    field_name: str
    operator: str
    operand: Any

    def matches(self, document: Mapping[str, Any]) -> bool:
        if self.field_name not in document:
            return False
        return _OPERATORS[self.operator](document[self.field_name], self.operand)


def compile_where_clause(where: Mapping[str, Any] | None, schema: Schema) -> tuple[FieldCondition, ...]:
    """Validate a ``where`` clause against ``schema`` and compile it.

    Raises:
        ParameterError: Unknown field, unknown condition key, malformed ``bt``
            or a non-mapping condition on a non-boolean field.
        TypeMismatchError: An operand whose type does not fit the field.
    """
    if not where:
        return ()

    conditions: list[FieldCondition] = []
    for field_name, condition in where.items():
        if field_name not in schema:
            msg = f"Field '{field_name}' does not exist in the schema"
            raise ParameterError(msg)
        field_type = schema[field_name]

        if field_type is FieldType.BOOLEAN:
            if not isinstance(condition, bool):
                msg = f"Expected a boolean for condition on field '{field_name}', but got {type(condition).__name__}"
                raise TypeMismatchError(msg)
            conditions.append(FieldCondition(field_name, "eq", condition))
            continue

        if not isinstance(condition, Mapping):
            msg = f"Condition on field '{field_name}' must be a mapping of {', '.join(WHERE_CONDITION_KEYS)}"
            raise ParameterError(msg)

        for key in condition:
            if key not in WHERE_CONDITION_KEYS:
                msg = f"Unrecognized condition '{key}' on field '{field_name}'"
                raise ParameterError(msg)

        for key, operand in condition.items():
            conditions.append(FieldCondition(field_name, key, _check_operand(field_name, field_type, key, operand)))
    return tuple(conditions)


def _check_operand(field_name: str, field_type: FieldType, key: str, operand: Any) -> Any:
    if key == "inc":
        if field_type is not FieldType.STRING:
            msg = f"Condition 'inc' on field '{field_name}' requires a string field, got a {field_type.value} field"
            raise TypeMismatchError(msg)
        if not isinstance(operand, str):
            msg = f"Condition 'inc' on field '{field_name}' expects a string, got {type(operand).__name__}"
            raise TypeMismatchError(msg)
        return operand

    if key == "bt":
        if not isinstance(operand, (list, tuple)) or len(operand) != 2:
            msg = f"Condition 'bt' on field '{field_name}' expects a two-element [min, max]"
            raise ParameterError(msg)
        for bound in operand:
            _require_type(field_name, field_type, key, bound)
        return tuple(operand)

    _require_type(field_name, field_type, key, operand)
    return operand


def _require_type(field_name: str, field_type: FieldType, key: str, operand: Any) -> None:
    if not field_type.accepts(operand):
        msg = (
            f"Condition '{key}' on field '{field_name}' expects a {field_type.value}, got {type(operand).__name__}"
        )
        raise TypeMismatchError(msg)


def apply_where_clause(
    documents: Iterable[Any],
    conditions: tuple[FieldCondition, ...],
    *,
    document_getter: Callable[[Any], Mapping[str, Any]] | None = None,
) -> list[Any]:
    """Keep the items whose document satisfies every condition.

    ``document_getter`` extracts the document from each item, so stored
    entries can be filtered without unwrapping them first.
    """
    items = list(documents)
    if not conditions:
        return items
    get = document_getter or (lambda item: item)
    return [item for item in items if all(condition.matches(get(item)) for condition in conditions)]


def parse_score_conditions(conditions: Mapping[str, Any] | ScoreConditions) -> ScoreConditions:
    """Validate raw score conditions.

    Raises:
        ParameterError: Unknown condition key or a threshold outside (0, 1).
    """
    if isinstance(conditions, ScoreConditions):
        return conditions
    if not isinstance(conditions, Mapping):
        msg = f"Score conditions must be a mapping of {', '.join(SCORE_CONDITION_KEYS)}"
        raise ParameterError(msg)
    for key in conditions:
        if key not in SCORE_CONDITION_KEYS:
            msg = f"Invalid score condition '{key}'. Expected conditions are 'gt', 'lt', and 'eq'"
            raise ParameterError(msg)
    try:
        return ScoreConditions.model_validate(dict(conditions))
    except PydanticValidationError as exc:
        msg = f"Invalid score value: {describe_validation_error(exc)}. Score must be between 0 and 1."
        raise ParameterError(msg) from exc


def filter_hits_by_score(
    hits: Iterable[SearchHit],
    conditions: Mapping[str, Any] | ScoreConditions | None,
) -> list[SearchHit]:
    """Filter a hit list by score thresholds.

    Usable on any previously obtained hit list. ``None`` or empty conditions
    return the hits unchanged.
    """
    if not conditions:
        return list(hits)
    parsed = parse_score_conditions(conditions)
    return [hit for hit in hits if parsed.accepts(hit.score)]


def describe_validation_error(exc: PydanticValidationError) -> str:
    """Flatten a pydantic error into ``loc: message`` pairs."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)
