"""Field values: canonical rendering, shape checks and parsing from text."""

import math
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Sequence

from atlas_url.errors import FieldParseError, MissingField, NoValuesInField, SchemaMismatch
from atlas_url.schema.base import ParameterDescriptor, ParameterKind

# name -> rendered scalar (None when absent) or list of rendered elements (None when absent)
ValueRecord = dict[str, str | list[str] | None]

_MISSING = object()


def render_value(value: Any) -> str:
    """Render a single value in its canonical text form."""
    if isinstance(value, Enum):
        return render_value(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _render_float(value)
    return str(value)


def _render_float(value: float) -> str:
    # Positional notation, never an exponent: 1e16 -> "10000000000000000"
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = format(Decimal(repr(value)), "f")
    return text[:-2] if text.endswith(".0") else text


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def render_field(descriptor: ParameterDescriptor, value: Any) -> str | list[str] | None:
    """Render a raw value according to the descriptor's kind."""
    kind = descriptor.kind
    if value is None or value is _MISSING:
        if kind.is_optional:
            return None
        raise SchemaMismatch(descriptor.name, f"a {kind.value} value", None)

    if kind.is_list:
        if not _is_sequence(value):
            raise SchemaMismatch(descriptor.name, "a list", value)
        if any(v is None for v in value):
            raise SchemaMismatch(descriptor.name, "a list without None elements", value)
        return [render_value(v) for v in value]

    if _is_sequence(value):
        raise SchemaMismatch(descriptor.name, "a single value", value)
    return render_value(value)


def render_record(descriptors: Sequence[ParameterDescriptor], values: Mapping[str, Any]) -> ValueRecord:
    """Turn raw Python values into a ValueRecord for the given fields."""
    return {d.name: render_field(d, values.get(d.name, _MISSING)) for d in descriptors}


def check_record(descriptors: Sequence[ParameterDescriptor], record: Mapping[str, Any]) -> None:
    """Raise SchemaMismatch when a ValueRecord entry disagrees with its descriptor."""
    for d in descriptors:
        entry = record.get(d.name)
        if entry is None:
            if not d.kind.is_optional:
                raise SchemaMismatch(d.name, f"a {d.kind.value} value", entry)
            continue
        if d.kind.is_list:
            if not isinstance(entry, list) or not all(isinstance(v, str) for v in entry):
                raise SchemaMismatch(d.name, "a list of strings", entry)
        elif not isinstance(entry, str):
            raise SchemaMismatch(d.name, "a string", entry)


def parse_value(descriptor: ParameterDescriptor, text: str) -> Any:
    """Parse one textual value as the descriptor's value_type."""
    vt = descriptor.value_type
    try:
        if vt == "integer":
            return int(text)
        if vt == "number":
            return float(text)
    except ValueError:
        raise FieldParseError(descriptor.name, text) from None
    if vt == "boolean":
        if text == "true":
            return True
        if text == "false":
            return False
        raise FieldParseError(descriptor.name, text)
    return text


def record_from_multimap(
    descriptors: Sequence[ParameterDescriptor],
    mapping: Mapping[str, Sequence[str]],
) -> dict[str, Any]:
    """Convert a name -> [text values] mapping into typed field values.

    Required scalars need at least one value (the first one is used);
    required lists need the key to be present; optional fields that are
    missing or empty become None.
    """
    result: dict[str, Any] = {}
    for d in descriptors:
        texts = mapping.get(d.name)
        if d.kind == ParameterKind.SCALAR:
            if texts is None:
                raise MissingField(d.name)
            if not texts:
                raise NoValuesInField(d.name)
            result[d.name] = parse_value(d, texts[0])
        elif d.kind == ParameterKind.OPTIONAL:
            result[d.name] = parse_value(d, texts[0]) if texts else None
        elif d.kind == ParameterKind.LIST:
            if texts is None:
                raise MissingField(d.name)
            result[d.name] = [parse_value(d, t) for t in texts]
        else:
            result[d.name] = [parse_value(d, t) for t in texts] if texts else None
    return result
