"""OpenAPI / Swagger document importer.

Turns every operation of an OpenAPI 3.x or Swagger 2.0 document into a
RequestSchema whose fields are the operation's path and query parameters.
"""

import logging
from pathlib import Path

import yaml

from .base import VALUE_TYPES, ParameterDescriptor, ParameterKind, RequestSchema

logger = logging.getLogger(__name__)

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")


def parse_openapi(file_path: Path) -> dict[str, RequestSchema]:
    """Parse an OpenAPI/Swagger file into request schemas keyed by operation."""
    text = file_path.read_text(encoding="utf-8")
    doc = yaml.safe_load(text)

    schemas: dict[str, RequestSchema] = {}
    paths = doc.get("paths", {})

    for path, methods in paths.items():
        shared = methods.get("parameters", [])
        for method, operation in methods.items():
            if method.upper() not in HTTP_METHODS:
                continue

            name = operation.get("operationId") or f"{method.upper()} {path}"
            fields = _parse_parameters(_merge_parameters(
                _resolve_all(doc, shared), _resolve_all(doc, operation.get("parameters", [])),
            ))
            schemas[name] = RequestSchema(name=name, template=path, fields=tuple(fields))

    logger.debug("Imported %d operations from %s", len(schemas), file_path)
    return schemas


def _resolve_all(doc: dict, params: list[dict]) -> list[dict]:
    return [_resolve_ref(doc, p) for p in params]


def _resolve_ref(doc: dict, param: dict) -> dict:
    """Follow a local '#/...' reference (e.g. #/components/parameters/groupId)."""
    seen = set()
    while "$ref" in param:
        ref = param["$ref"]
        if not ref.startswith("#/") or ref in seen:
            raise KeyError(f"unresolvable parameter reference: {ref}")
        seen.add(ref)
        node = doc
        for part in ref[2:].split("/"):
            node = node[part.replace("~1", "/").replace("~0", "~")]
        param = node
    return param


def _merge_parameters(shared: list[dict], own: list[dict]) -> list[dict]:
    # Operation parameters override path-level ones with the same name and location
    keys = {(p.get("name"), p.get("in")) for p in own}
    return [p for p in shared if (p.get("name"), p.get("in")) not in keys] + list(own)


def _parse_parameters(params: list[dict]) -> list[ParameterDescriptor]:
    result = []
    for p in params:
        location = p.get("in", "query")
        if location not in ("path", "query"):
            continue

        # OpenAPI 3 nests the type under "schema", Swagger 2 puts it on the parameter
        schema = p.get("schema", p)
        param_type = schema.get("type", "string")
        required = location == "path" or p.get("required", False)

        if param_type == "array":
            value_type = schema.get("items", {}).get("type", "string")
            kind = ParameterKind.LIST if required else ParameterKind.OPTIONAL_LIST
        else:
            value_type = param_type
            kind = ParameterKind.SCALAR if required else ParameterKind.OPTIONAL

        if value_type not in VALUE_TYPES:
            value_type = "string"

        result.append(ParameterDescriptor(name=p["name"], kind=kind, value_type=value_type))
    return result
