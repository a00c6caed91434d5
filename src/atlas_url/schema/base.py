"""Parameter schema models for request types.

Every schema source (request models, YAML catalogs, OpenAPI documents)
produces these models for the binding engine.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator

VALUE_TYPES = ("string", "integer", "number", "boolean")


class ParameterKind(str, Enum):
    """Value shape of a field."""

    SCALAR = "scalar"
    OPTIONAL = "optional"
    LIST = "list"
    OPTIONAL_LIST = "optional_list"

    @property
    def is_optional(self) -> bool:
        return self in (ParameterKind.OPTIONAL, ParameterKind.OPTIONAL_LIST)

    @property
    def is_list(self) -> bool:
        return self in (ParameterKind.LIST, ParameterKind.OPTIONAL_LIST)


class ParameterDescriptor(BaseModel):
    """A single declared field of a request type."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: ParameterKind = ParameterKind.SCALAR
    value_type: str = "string"  # string / integer / number / boolean

    @field_validator("value_type")
    @classmethod
    def _check_value_type(cls, v: str) -> str:
        if v not in VALUE_TYPES:
            raise ValueError(f"value_type must be one of {', '.join(VALUE_TYPES)}, got {v!r}")
        return v


class RequestSchema(BaseModel):
    """A request type: its path template and its fields in declaration order."""

    model_config = ConfigDict(frozen=True)

    name: str
    template: str
    fields: tuple[ParameterDescriptor, ...] = ()

    @field_validator("fields")
    @classmethod
    def _unique_names(cls, v: tuple[ParameterDescriptor, ...]) -> tuple[ParameterDescriptor, ...]:
        seen = set()
        for field in v:
            if field.name in seen:
                raise ValueError(f"duplicate field name: {field.name}")
            seen.add(field.name)
        return v


class SchemaBuilder:
    """Registers fields one by one for a request type."""

    def __init__(self, name: str, template: str):
        self.name = name
        self.template = template
        self._fields: list[ParameterDescriptor] = []

    def register_field(
        self,
        name: str,
        kind: ParameterKind | str = ParameterKind.SCALAR,
        value_type: str = "string",
    ) -> "SchemaBuilder":
        self._fields.append(ParameterDescriptor(name=name, kind=ParameterKind(kind), value_type=value_type))
        return self

    def build(self) -> RequestSchema:
        return RequestSchema(name=self.name, template=self.template, fields=tuple(self._fields))
