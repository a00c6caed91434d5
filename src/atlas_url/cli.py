"""CLI entry point for atlas-url."""

import logging
from pathlib import Path

import click
import yaml
from pydantic import ValidationError

from atlas_url.binding.analyzer import FieldRef, analyze, plan_for_schema
from atlas_url.binding.binder import bind
from atlas_url.binding.values import record_from_multimap, render_record
from atlas_url.errors import BindingError
from atlas_url.schema.base import ParameterDescriptor, RequestSchema
from atlas_url.schema.detect import load_schemas

BASE_URL_ENVVAR = "ATLAS_BASE_URL"


def _parse_field_spec(spec: str) -> ParameterDescriptor:
    """Parse 'name[:kind[:type]]' into a descriptor."""
    parts = spec.split(":")
    if len(parts) > 3 or not parts[0]:
        raise click.BadParameter(f"expected name[:kind[:type]], got {spec!r}", param_hint="--field")
    try:
        return ParameterDescriptor(
            name=parts[0],
            kind=parts[1] if len(parts) > 1 and parts[1] else "scalar",
            value_type=parts[2] if len(parts) > 2 and parts[2] else "string",
        )
    except ValidationError as e:
        raise click.BadParameter(f"{spec!r}: {e.errors()[0]['msg']}", param_hint="--field") from e


def _parse_params(params: tuple[str, ...]) -> dict[str, list[str]]:
    """Group repeated 'name=value' options into a name -> values mapping."""
    mapping: dict[str, list[str]] = {}
    for item in params:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected name=value, got {item!r}", param_hint="--param")
        mapping.setdefault(name, []).append(value)
    return mapping


def _build_schema(template: str, field_specs: tuple[str, ...]) -> RequestSchema:
    fields = tuple(_parse_field_spec(s) for s in field_specs)
    try:
        return RequestSchema(name="cli", template=template, fields=fields)
    except ValidationError as e:
        raise click.BadParameter(e.errors()[0]["msg"], param_hint="--field") from e


def _bind_schema(schema: RequestSchema, params: tuple[str, ...], base_url: str, allow_optional_path: bool) -> str:
    mapping = _parse_params(params)
    declared = {f.name for f in schema.fields}
    unknown = sorted(set(mapping) - declared)
    if unknown:
        raise click.BadParameter(f"unknown parameter(s): {', '.join(unknown)}", param_hint="--param")

    try:
        plan = plan_for_schema(schema, allow_optional_path)
        values = record_from_multimap(schema.fields, mapping)
        return bind(plan, render_record(schema.fields, values), base_url)
    except BindingError as e:
        raise click.ClickException(str(e)) from e


field_option = click.option(
    "-f", "--field", "field_specs", multiple=True,
    help="Declared field as name[:kind[:type]]; kind is scalar/optional/list/optional_list.",
)
param_option = click.option("-p", "--param", "params", multiple=True, help="Field value as name=value (repeat for lists).")
base_url_option = click.option(
    "--base-url", required=True, envvar=BASE_URL_ENVVAR, show_envvar=True, help="Base URL the path is appended to.",
)
optional_path_option = click.option(
    "--allow-optional-path", is_flag=True, help="Allow optional fields as path placeholders (absent -> empty).",
)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """atlas-url: turn typed request parameters into request URLs."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument("template")
@field_option
@optional_path_option
def plan(template: str, field_specs: tuple[str, ...], allow_optional_path: bool):
    """Show how a template splits into path and query fields."""
    schema = _build_schema(template, field_specs)
    try:
        result = analyze(schema.template, schema.fields, allow_optional_path=allow_optional_path)
    except BindingError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Template: {result.template}")
    for seg in result.segments:
        if isinstance(seg, FieldRef):
            click.echo(f"  field    {seg.name}")
        else:
            click.echo(f"  literal  {seg.text!r}")
    click.echo(f"Path fields: {', '.join(sorted(result.path_field_names)) or '-'}")
    click.echo(f"Query fields: {', '.join(f.name for f in result.query_fields) or '-'}")


@main.command(name="bind")
@click.argument("template")
@field_option
@param_option
@base_url_option
@optional_path_option
def bind_command(template: str, field_specs: tuple[str, ...], params: tuple[str, ...], base_url: str, allow_optional_path: bool):
    """Bind field values into TEMPLATE and print the URL."""
    schema = _build_schema(template, field_specs)
    click.echo(_bind_schema(schema, params, base_url, allow_optional_path))


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
@click.argument("name")
@param_option
@base_url_option
@optional_path_option
@click.option("--format", "fmt", default="auto", type=click.Choice(["auto", "catalog", "openapi"]), help="Document format.")
def request(doc_path: Path, name: str, params: tuple[str, ...], base_url: str, allow_optional_path: bool, fmt: str):
    """Bind a request type from a YAML catalog or OpenAPI document."""
    schemas = _load(doc_path, fmt)
    if name not in schemas:
        raise click.ClickException(f"Request {name!r} not found in {doc_path}")
    click.echo(_bind_schema(schemas[name], params, base_url, allow_optional_path))


@main.command(name="list")
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
@click.option("--format", "fmt", default="auto", type=click.Choice(["auto", "catalog", "openapi"]), help="Document format.")
def list_requests(doc_path: Path, fmt: str):
    """List the request types defined in a document."""
    for name, schema in _load(doc_path, fmt).items():
        click.echo(f"{name}\t{schema.template}")


def _load(doc_path: Path, fmt: str) -> dict[str, RequestSchema]:
    try:
        return load_schemas(doc_path, fmt)
    except (ValidationError, yaml.YAMLError, KeyError, AttributeError) as e:
        raise click.ClickException(f"Invalid schema document {doc_path}: {e}") from e
