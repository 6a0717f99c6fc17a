"""
Declarative input contracts for tools.

Each tool declares a tuple of ``FieldSpec`` entries; ``validate_args`` is the
single interpreter that checks raw arguments against them and
``contract_to_schema`` publishes the same table as JSON Schema for tool
listings.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from zora_mcp.errors import ValidationError

FIELD_TYPES = ("string", "integer", "number", "boolean", "array", "object")

_MISSING = object()


@dataclass(frozen=True, slots=True)
class FieldSpec:
    name: str
    type: str
    required: bool = False
    default: Any = None
    description: str = ""
    min_length: Optional[int] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    enum: Optional[Tuple[Any, ...]] = None
    items: Optional["FieldSpec"] = None
    properties: Tuple["FieldSpec", ...] = ()
    min_items: Optional[int] = None
    strip: bool = False

    def __post_init__(self) -> None:
        if self.type not in FIELD_TYPES:
            raise ValueError(f"unsupported field type {self.type!r} for {self.name}")


def page_size_field(name: str = "count", *, maximum: int = 100) -> FieldSpec:
    return FieldSpec(
        name,
        "integer",
        minimum=1,
        maximum=maximum,
        description=f"Optional page size (1-{maximum})",
    )


def cursor_field() -> FieldSpec:
    return FieldSpec("after", "string", description="Pagination cursor from a previous page")


def _check_type(spec: FieldSpec, value: Any, path: str) -> Any:
    """Return ``value`` coerced to the declared type or raise ValidationError."""
    kind = spec.type
    if kind == "string":
        if not isinstance(value, str):
            raise ValidationError(path, "must be a string")
        return value.strip() if spec.strip else value
    if kind == "boolean":
        if not isinstance(value, bool):
            raise ValidationError(path, "must be a boolean")
        return value
    if kind in ("integer", "number"):
        # bool is an int subclass; JSON true/false is never a number here.
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(path, f"must be an {kind}" if kind == "integer" else "must be a number")
        if isinstance(value, float) and not math.isfinite(value):
            raise ValidationError(path, "must be a finite number")
        if kind == "integer":
            if isinstance(value, float):
                if not value.is_integer():
                    raise ValidationError(path, "must be an integer")
                value = int(value)
        return value
    if kind == "array":
        if not isinstance(value, (list, tuple)):
            raise ValidationError(path, "must be an array")
        return list(value)
    if not isinstance(value, Mapping):
        raise ValidationError(path, "must be an object")
    return value


def _check_field(spec: FieldSpec, value: Any, path: str) -> Any:
    value = _check_type(spec, value, path)

    if spec.enum is not None and value not in spec.enum:
        allowed = ", ".join(str(option) for option in spec.enum)
        raise ValidationError(path, f"must be one of: {allowed}")

    if spec.type == "string" and spec.min_length is not None and len(value) < spec.min_length:
        if spec.min_length == 1:
            raise ValidationError(path, "must not be empty")
        raise ValidationError(path, f"must be at least {spec.min_length} characters")

    if spec.type in ("integer", "number"):
        if spec.minimum is not None and value < spec.minimum:
            raise ValidationError(path, f"must be >= {spec.minimum:g}")
        if spec.maximum is not None and value > spec.maximum:
            raise ValidationError(path, f"must be <= {spec.maximum:g}")

    if spec.type == "array":
        if spec.min_items is not None and len(value) < spec.min_items:
            raise ValidationError(path, f"must contain at least {spec.min_items} item(s)")
        if spec.items is not None:
            value = [
                _check_field(spec.items, item, f"{path}[{index}]") for index, item in enumerate(value)
            ]

    if spec.type == "object" and spec.properties:
        value = _validate_members(spec.properties, value, prefix=f"{path}.")

    return value


def _validate_members(
    fields: Sequence[FieldSpec], raw: Mapping[str, Any], *, prefix: str = ""
) -> Dict[str, Any]:
    validated: Dict[str, Any] = {}
    for spec in fields:
        path = f"{prefix}{spec.name}"
        value = raw.get(spec.name, _MISSING)
        # JSON null on an optional field means "not provided".
        if value is _MISSING or value is None:
            if spec.required:
                raise ValidationError(path, "is required")
            if spec.default is not None:
                validated[spec.name] = spec.default
            continue
        validated[spec.name] = _check_field(spec, value, path)
    return validated


def validate_args(fields: Sequence[FieldSpec], raw_args: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Validate raw tool arguments against a field table.

    Unknown keys are ignored and omitted from the result; optional fields that
    are absent take their declared default (or are left out when there is none).

    Raises:
        ValidationError: naming the first offending field and its constraint.
    """
    if raw_args is None:
        raw_args = {}
    if not isinstance(raw_args, Mapping):
        raise ValidationError("arguments", "must be an object")
    return _validate_members(fields, raw_args)


def _field_schema(spec: FieldSpec) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": spec.type}
    if spec.description:
        schema["description"] = spec.description
    if spec.enum is not None:
        schema["enum"] = list(spec.enum)
    if spec.min_length is not None:
        schema["minLength"] = spec.min_length
    if spec.minimum is not None:
        schema["minimum"] = spec.minimum
    if spec.maximum is not None:
        schema["maximum"] = spec.maximum
    if spec.default is not None:
        schema["default"] = spec.default
    if spec.type == "array":
        if spec.items is not None:
            schema["items"] = _field_schema(spec.items)
        if spec.min_items is not None:
            schema["minItems"] = spec.min_items
    if spec.type == "object" and spec.properties:
        schema.update(contract_to_schema(spec.properties))
    return schema


def contract_to_schema(fields: Sequence[FieldSpec]) -> Dict[str, Any]:
    """Render a field table as a JSON Schema object for tool listings."""
    return {
        "type": "object",
        "properties": {spec.name: _field_schema(spec) for spec in fields},
        "required": [spec.name for spec in fields if spec.required],
    }
