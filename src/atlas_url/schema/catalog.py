"""YAML request catalog loader.

A catalog lists request types by name:

    requests:
      getCluster:
        template: /api/atlas/v2/groups/{group_id}/clusters/{cluster_name}
        fields:
          - {name: group_id}
          - {name: cluster_name}
          - {name: pretty, kind: optional, type: boolean}
"""

from pathlib import Path

import yaml

from .base import ParameterDescriptor, RequestSchema


def load_catalog(file_path: Path) -> dict[str, RequestSchema]:
    """Load a YAML catalog file into request schemas keyed by name."""
    text = file_path.read_text(encoding="utf-8")
    doc = yaml.safe_load(text) or {}
    return parse_catalog(doc)


def parse_catalog(doc: dict) -> dict[str, RequestSchema]:
    result = {}
    for name, entry in doc.get("requests", {}).items():
        result[name] = RequestSchema(
            name=name,
            template=entry["template"],
            fields=tuple(_parse_field(f) for f in entry.get("fields", [])),
        )
    return result


def _parse_field(field: dict) -> ParameterDescriptor:
    return ParameterDescriptor(
        name=field["name"],
        kind=field.get("kind", "scalar"),
        value_type=field.get("type", "string"),
    )
