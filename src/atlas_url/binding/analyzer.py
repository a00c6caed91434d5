"""Template analyzer: splits a path template into literal and placeholder segments.

The resulting BindingPlan is immutable and can be shared between threads
and reused for any number of bind() calls.
"""

import logging
from functools import lru_cache
from typing import Iterable, Union

from pydantic import BaseModel, ConfigDict

from atlas_url.errors import DuplicateField, OptionalPathField, UndeclaredField, UnterminatedPlaceholder
from atlas_url.schema.base import ParameterDescriptor, RequestSchema

logger = logging.getLogger(__name__)


class LiteralSegment(BaseModel):
    """Template text copied verbatim into the path."""

    model_config = ConfigDict(frozen=True)

    text: str


class FieldRef(BaseModel):
    """A {name} placeholder in the template."""

    model_config = ConfigDict(frozen=True)

    name: str


TemplateSegment = Union[LiteralSegment, FieldRef]


class BindingPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    template: str
    segments: tuple[TemplateSegment, ...]
    fields: tuple[ParameterDescriptor, ...]
    path_field_names: frozenset[str]
    query_fields: tuple[ParameterDescriptor, ...]


def parse_template(template: str) -> list[TemplateSegment]:
    """Split a template on '{' / '}' into literal and placeholder segments."""
    pieces = template.split("{")
    segments: list[TemplateSegment] = []
    if pieces[0]:
        segments.append(LiteralSegment(text=pieces[0]))

    offset = len(pieces[0])
    for piece in pieces[1:]:
        name, sep, rest = piece.partition("}")
        if not sep:
            raise UnterminatedPlaceholder(template, offset)
        segments.append(FieldRef(name=name.strip()))
        if rest:
            segments.append(LiteralSegment(text=rest))
        offset += 1 + len(piece)
    return segments


def analyze(
    template: str,
    descriptors: Iterable[ParameterDescriptor],
    allow_optional_path: bool = False,
) -> BindingPlan:
    """Build a BindingPlan for a template and its declared fields.

    Fields referenced by a placeholder become path fields; every other field
    becomes a query field, keeping declaration order. Optional fields in path
    position are rejected unless allow_optional_path is set, in which case an
    absent value renders as an empty string.
    """
    fields = tuple(descriptors)
    by_name: dict[str, ParameterDescriptor] = {}
    for d in fields:
        if d.name in by_name:
            raise DuplicateField(d.name)
        by_name[d.name] = d
    segments = parse_template(template)

    path_names = set()
    for seg in segments:
        if not isinstance(seg, FieldRef):
            continue
        descriptor = by_name.get(seg.name)
        if descriptor is None:
            raise UndeclaredField(seg.name)
        if descriptor.kind.is_optional and not allow_optional_path:
            raise OptionalPathField(seg.name)
        path_names.add(seg.name)

    query_fields = tuple(d for d in fields if d.name not in path_names)
    logger.debug(
        "Analyzed %r: path fields %s, query fields %s",
        template, sorted(path_names), [d.name for d in query_fields],
    )
    return BindingPlan(
        template=template,
        segments=tuple(segments),
        fields=fields,
        path_field_names=frozenset(path_names),
        query_fields=query_fields,
    )


@lru_cache(maxsize=256)
def plan_for(
    template: str,
    descriptors: tuple[ParameterDescriptor, ...],
    allow_optional_path: bool = False,
) -> BindingPlan:
    """Memoized analyze(), keyed by template and descriptor set."""
    logger.debug("Plan cache miss for %r", template)
    return analyze(template, descriptors, allow_optional_path=allow_optional_path)


def plan_for_schema(schema: RequestSchema, allow_optional_path: bool = False) -> BindingPlan:
    return plan_for(schema.template, schema.fields, allow_optional_path)
