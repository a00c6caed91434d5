"""Binder: renders a BindingPlan and a ValueRecord into a request URL."""

import logging
from typing import Mapping

import requests

from atlas_url.binding.analyzer import BindingPlan, FieldRef
from atlas_url.binding.values import check_record
from atlas_url.errors import UrlParseError
from atlas_url.schema.base import ParameterDescriptor, ParameterKind

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = ("http://", "https://")
_PATH_DELIMITERS = str.maketrans({"?": "%3F", "#": "%23"})


def bind(plan: BindingPlan, values: Mapping[str, str | list[str] | None], base_url: str) -> str:
    """Render the path, append query fields and return the full URL.

    The rendered path is appended to base_url as-is; only '?' and '#' inside
    path values are percent-encoded. Lists are comma-joined in the path and
    repeated as name=value pairs in the query. Absent optional fields and
    empty lists are left out of the query, and an empty query leaves no
    trailing '?'.
    """
    check_record(plan.fields, values)

    path = "".join(_render_segment(seg, values) for seg in plan.segments)
    pairs = _query_pairs(plan.query_fields, values)
    url = _prepare(base_url + path, pairs)

    logger.debug("Bound %r -> %s", plan.template, url)
    return url


def _render_segment(segment, values: Mapping) -> str:
    if not isinstance(segment, FieldRef):
        return segment.text
    entry = values.get(segment.name)
    if entry is None:
        return ""
    if isinstance(entry, list):
        entry = ",".join(entry)
    # a value must not end the path early
    return entry.translate(_PATH_DELIMITERS)


def _query_pairs(fields: tuple[ParameterDescriptor, ...], values: Mapping) -> list[tuple[str, str]]:
    pairs = []
    for d in fields:
        entry = values.get(d.name)
        if d.kind == ParameterKind.SCALAR:
            pairs.append((d.name, entry))
        elif d.kind == ParameterKind.OPTIONAL:
            if entry is not None:
                pairs.append((d.name, entry))
        elif entry:
            pairs.extend((d.name, v) for v in entry)
    return pairs


def _prepare(url: str, pairs: list[tuple[str, str]]) -> str:
    # requests leaves non-http URLs untouched, so they would never get a query
    if not url.lower().startswith(SUPPORTED_SCHEMES):
        raise UrlParseError(url, "URL must start with http:// or https://")
    try:
        prepared = requests.Request("GET", url, params=pairs).prepare()
    except requests.exceptions.RequestException as e:
        raise UrlParseError(url, str(e)) from e
    return prepared.url
