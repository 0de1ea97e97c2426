"""
Declarative input schemas for MCP operations.

Each operation declares its parameters as a sequence of FieldSpec objects
bundled into an InputSchema. The schema validates and coerces raw tool-call
arguments before dispatch and renders itself as JSON Schema for the
``tools/list`` discovery response.

Validation rules:
- Unknown fields are dropped.
- A required field that is absent fails with constraint ``required``.
- An optional field that is absent takes its declared default; optional
  fields without a default are left out of the validated params.
- An explicit ``null`` is a type mismatch for every field and never falls
  back to the default.
- Numeric bounds are inclusive on both ends and never clamp.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from mcp_github.errors import ValidationError


class FieldKind(str, Enum):
    """Primitive kinds supported by the schema validator."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ENUM = "enum"
    STRING_ARRAY = "string_array"


class _Missing:
    """Sentinel type for "no default declared"."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

# Human-readable expectation per kind, used in error messages
_EXPECTED: dict[FieldKind, str] = {
    FieldKind.STRING: "a string",
    FieldKind.NUMBER: "a number",
    FieldKind.INTEGER: "an integer",
    FieldKind.BOOLEAN: "a boolean",
    FieldKind.ENUM: "a string",
    FieldKind.STRING_ARRAY: "an array of strings",
}


def _json_type_name(value: Any) -> str:
    """Return the JSON type name of a decoded JSON value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a JSON number
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class FieldSpec:
    """
    Declaration of a single operation parameter.

    Attributes:
        name: Parameter name as it appears in the tool-call arguments.
        kind: Primitive kind of the parameter.
        description: Human-readable description shown during discovery.
        required: Whether the parameter must be supplied. Fields with a
            declared default are always optional.
        default: Value used when the parameter is absent.
        minimum: Inclusive lower bound for numeric kinds.
        maximum: Inclusive upper bound for numeric kinds.
        choices: Allowed values for the ENUM kind.
    """

    name: str
    kind: FieldKind
    description: str = ""
    required: bool = True
    default: Any = MISSING
    minimum: float | None = None
    maximum: float | None = None
    choices: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.kind is FieldKind.ENUM and not self.choices:
            raise ValueError(f"Enum field '{self.name}' must declare choices")
        if self.has_default:
            # A declared default implies the field is optional
            object.__setattr__(self, "required", False)

    @property
    def has_default(self) -> bool:
        """Check whether a default value is declared."""
        return self.default is not MISSING

    def _type_error(self, value: Any) -> ValidationError:
        expected = _EXPECTED[self.kind]
        got = _json_type_name(value)
        return ValidationError(
            f"Parameter '{self.name}' must be {expected}, got {got}",
            field=self.name,
            constraint="type",
            details={"expected": self.kind.value, "got": got},
        )

    def _check_bounds(self, value: float) -> None:
        if self.minimum is not None and value < self.minimum:
            raise ValidationError(
                f"Parameter '{self.name}' must be >= {self.minimum:g}, got {value}",
                field=self.name,
                constraint="minimum",
                details={"value": value, "minimum": self.minimum},
            )
        if self.maximum is not None and value > self.maximum:
            raise ValidationError(
                f"Parameter '{self.name}' must be <= {self.maximum:g}, got {value}",
                field=self.name,
                constraint="maximum",
                details={"value": value, "maximum": self.maximum},
            )

    def coerce(self, value: Any) -> Any:
        """
        Validate a supplied value and return its coerced form.

        Args:
            value: Raw value taken from the tool-call arguments.

        Returns:
            The validated value (integral floats become int for INTEGER).

        Raises:
            ValidationError: If the value violates the declaration.
        """
        if value is None:
            raise self._type_error(value)

        if self.kind is FieldKind.STRING:
            if not isinstance(value, str):
                raise self._type_error(value)
            return value

        if self.kind is FieldKind.BOOLEAN:
            if not isinstance(value, bool):
                raise self._type_error(value)
            return value

        if self.kind is FieldKind.NUMBER:
            if not _is_number(value):
                raise self._type_error(value)
            self._check_bounds(value)
            return value

        if self.kind is FieldKind.INTEGER:
            if not _is_number(value):
                raise self._type_error(value)
            if isinstance(value, float):
                if not value.is_integer():
                    raise self._type_error(value)
                value = int(value)
            self._check_bounds(value)
            return value

        if self.kind is FieldKind.ENUM:
            if not isinstance(value, str):
                raise self._type_error(value)
            if value not in self.choices:
                raise ValidationError(
                    f"Parameter '{self.name}' must be one of "
                    f"{', '.join(self.choices)}, got '{value}'",
                    field=self.name,
                    constraint="enum",
                    details={"value": value, "allowed": list(self.choices)},
                )
            return value

        # FieldKind.STRING_ARRAY
        if not isinstance(value, (list, tuple)):
            raise self._type_error(value)
        for index, item in enumerate(value):
            if not isinstance(item, str):
                raise ValidationError(
                    f"Parameter '{self.name}' must be an array of strings, "
                    f"item {index} is {_json_type_name(item)}",
                    field=self.name,
                    constraint="type",
                    details={"index": index, "expected": "string"},
                )
        return list(value)

    def to_json_schema(self) -> dict[str, Any]:
        """Render this field as a JSON Schema property."""
        prop: dict[str, Any]
        if self.kind is FieldKind.ENUM:
            prop = {"type": "string", "enum": list(self.choices)}
        elif self.kind is FieldKind.STRING_ARRAY:
            prop = {"type": "array", "items": {"type": "string"}}
        else:
            prop = {"type": self.kind.value}

        if self.minimum is not None:
            prop["minimum"] = self.minimum
        if self.maximum is not None:
            prop["maximum"] = self.maximum
        if self.has_default:
            prop["default"] = self.default
        if self.description:
            prop["description"] = self.description
        return prop


class InputSchema:
    """
    Ordered collection of FieldSpec declarations for one operation.

    Example:
        >>> schema = InputSchema(
        ...     FieldSpec("owner", FieldKind.STRING, "Repository owner"),
        ...     FieldSpec("per_page", FieldKind.INTEGER, minimum=1, maximum=100, default=30),
        ... )
        >>> schema.validate({"owner": "octocat", "extra": 1})
        {'owner': 'octocat', 'per_page': 30}
    """

    def __init__(self, *fields: FieldSpec) -> None:
        names = [f.name for f in fields]
        duplicates = {n for n in names if names.count(n) > 1}
        if duplicates:
            raise ValueError(f"Duplicate schema fields: {sorted(duplicates)}")
        self._fields: tuple[FieldSpec, ...] = tuple(fields)

    @property
    def fields(self) -> tuple[FieldSpec, ...]:
        """Return the declared fields in declaration order."""
        return self._fields

    def get(self, name: str) -> FieldSpec | None:
        """Return the field declared under ``name``, if any."""
        for declared in self._fields:
            if declared.name == name:
                return declared
        return None

    def validate(self, raw: Any) -> dict[str, Any]:
        """
        Validate raw arguments against the schema.

        Args:
            raw: Decoded tool-call arguments (must be a JSON object).

        Returns:
            Validated params, in declaration order.

        Raises:
            ValidationError: On the first violated constraint.
        """
        if not isinstance(raw, Mapping):
            raise ValidationError(
                f"Arguments must be an object, got {_json_type_name(raw)}",
                constraint="type",
            )

        validated: dict[str, Any] = {}
        for declared in self._fields:
            if declared.name not in raw:
                if declared.has_default:
                    validated[declared.name] = declared.default
                elif declared.required:
                    raise ValidationError(
                        f"Parameter '{declared.name}' is required",
                        field=declared.name,
                        constraint="required",
                    )
                continue
            validated[declared.name] = declared.coerce(raw[declared.name])
        return validated

    def to_json_schema(self) -> dict[str, Any]:
        """
        Render the schema as a JSON Schema object for discovery.

        Returns:
            Dictionary with type, properties, required and
            additionalProperties keys.
        """
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {f.name: f.to_json_schema() for f in self._fields},
            "additionalProperties": False,
        }
        required = [f.name for f in self._fields if f.required]
        if required:
            schema["required"] = required
        return schema

    def __iter__(self) -> Iterator[FieldSpec]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)
