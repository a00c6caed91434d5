"""Auto-detect schema document format."""

from pathlib import Path

import yaml

from .base import RequestSchema
from .catalog import load_catalog
from .openapi import parse_openapi


def detect_format(file_path: Path) -> str:
    """Detect the format of a schema document.

    Returns: 'openapi' or 'catalog'.
    """
    text = file_path.read_text(encoding="utf-8")

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError:
        return "catalog"

    if isinstance(data, dict) and ("openapi" in data or "swagger" in data):
        return "openapi"
    return "catalog"


def load_schemas(file_path: Path, fmt: str = "auto") -> dict[str, RequestSchema]:
    """Load request schemas from a catalog or an OpenAPI document."""
    if fmt == "auto":
        fmt = detect_format(file_path)

    if fmt == "openapi":
        return parse_openapi(file_path)
    return load_catalog(file_path)
