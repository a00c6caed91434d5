"""Request models: pydantic classes that know how to render themselves as URLs.

    class ListClusters(UrlModel):
        url_template: ClassVar[str] = "/api/atlas/v2/groups/{group_id}/clusters"

        group_id: str
        items_per_page: int | None = None
        include_count: bool = True

    ListClusters(group_id="abc").as_url("https://cloud.mongodb.com")

The parameter schema is read from the field annotations once per class.
"""

import types
import typing
from functools import lru_cache
from typing import Any, ClassVar, Mapping, Sequence

from pydantic import BaseModel

from atlas_url.binding.analyzer import plan_for_schema
from atlas_url.binding.binder import bind
from atlas_url.binding.values import record_from_multimap, render_record
from atlas_url.schema.base import ParameterDescriptor, ParameterKind, RequestSchema

_VALUE_TYPES = {bool: "boolean", int: "integer", float: "number", str: "string"}


def _strip_optional(annotation: Any) -> tuple[Any, bool]:
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1 and len(args) < len(typing.get_args(annotation)):
            return args[0], True
    return annotation, False


def _descriptor_for(name: str, annotation: Any) -> ParameterDescriptor:
    inner, optional = _strip_optional(annotation)
    is_list = typing.get_origin(inner) is list
    if is_list:
        args = typing.get_args(inner)
        inner = args[0] if args else str

    if is_list:
        kind = ParameterKind.OPTIONAL_LIST if optional else ParameterKind.LIST
    else:
        kind = ParameterKind.OPTIONAL if optional else ParameterKind.SCALAR
    return ParameterDescriptor(name=name, kind=kind, value_type=_VALUE_TYPES.get(inner, "string"))


@lru_cache(maxsize=None)
def _schema_for(cls: type["UrlModel"]) -> RequestSchema:
    if not cls.url_template:
        raise TypeError(f"{cls.__name__} requires a url_template, e.g. url_template = \"/path/to/resource\"")
    fields = tuple(
        _descriptor_for(info.alias or name, info.annotation)
        for name, info in cls.model_fields.items()
    )
    return RequestSchema(name=cls.__name__, template=cls.url_template, fields=fields)


class UrlModel(BaseModel):
    """Base class for request types rendered through a path template."""

    url_template: ClassVar[str] = ""

    @classmethod
    def request_schema(cls) -> RequestSchema:
        return _schema_for(cls)

    @classmethod
    def from_multimap(cls, mapping: Mapping[str, Sequence[str]]) -> "UrlModel":
        """Build an instance from textual values, e.g. a parsed query string."""
        values = record_from_multimap(cls.request_schema().fields, mapping)
        return cls.model_validate(values)

    def as_url(self, base_url: str, allow_optional_path: bool = False) -> str:
        schema = self.request_schema()
        raw = {info.alias or name: getattr(self, name) for name, info in type(self).model_fields.items()}
        record = render_record(schema.fields, raw)
        return bind(plan_for_schema(schema, allow_optional_path), record, base_url)
