"""CLI entry point for api-doc-builder."""

import fnmatch
import logging
from pathlib import Path

import click

from api_doc_builder.discovery.manifest import load_manifest
from api_doc_builder.document.models import EndpointDescriptor, EndpointGroup
from api_doc_builder.errors import DocumentGenerationError
from api_doc_builder.generator.document import DocumentGenerator
from api_doc_builder.generator.settings import GeneratorSettings, load_settings
from api_doc_builder.processors.summary import LlmSummaryProcessor
from api_doc_builder.serializer import dump


def _endpoint_key(endpoint: EndpointDescriptor) -> tuple[str, str]:
    path = endpoint.relative_path
    if not path.startswith("/"):
        path = "/" + path
    return (endpoint.http_method or "GET").upper(), path


def _filter_endpoints(groups: list[EndpointGroup], patterns: tuple[str, ...]) -> list[EndpointGroup]:
    """Keep endpoints matching any 'METHOD /path' or '/path' glob pattern."""
    if not patterns:
        return groups

    def matches(endpoint: EndpointDescriptor) -> bool:
        method, path = _endpoint_key(endpoint)
        for pattern in patterns:
            parts = pattern.split(maxsplit=1)
            if len(parts) == 2:
                if parts[0].upper() == method and fnmatch.fnmatch(path, parts[1]):
                    return True
            elif fnmatch.fnmatch(path, parts[0]):
                return True
        return False

    return [
        EndpointGroup(group_name=g.group_name, endpoints=[e for e in g.endpoints if matches(e)])
        for g in groups
    ]


def _output_format(output: Path, fmt: str) -> str:
    if fmt != "auto":
        return fmt
    return "yaml" if output.suffix.lower() in (".yaml", ".yml") else "json"


@click.group()
@click.option("-v", "--verbose", count=True, help="Log progress (-v) or every pipeline step (-vv).")
def main(verbose: int):
    """API Doc Builder — assemble API description documents from discovered endpoints."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG if verbose > 1 else logging.INFO,
            format="%(levelname)s %(name)s: %(message)s",
        )


@main.command()
@click.argument("manifest_path", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for the document.")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="Settings YAML file.")
@click.option("--format", "fmt", default="auto", type=click.Choice(["auto", "json", "yaml"]), help="Output format.")
@click.option("--schema-type", default=None, type=click.Choice(["openapi3", "swagger2"]), help="Document flavour.")
@click.option("--title", default=None, help="Document title.")
@click.option("--doc-version", default=None, help="Document version.")
@click.option("--group", "groups", multiple=True, help="Only include these API groups (repeatable).")
@click.option("--only", "only", multiple=True, help="Only include endpoints like 'GET /pets*' or '/pets/*' (repeatable).")
@click.option("--llm-summaries", is_flag=True, help="Write missing operation summaries with an LLM.")
@click.option("--model", default=None, help="LLM model to use.")
def generate(
    manifest_path: Path,
    output: Path,
    config_path: Path | None,
    fmt: str,
    schema_type: str | None,
    title: str | None,
    doc_version: str | None,
    groups: tuple[str, ...],
    only: tuple[str, ...],
    llm_summaries: bool,
    model: str | None,
):
    """Generate an API document from an endpoint manifest."""
    try:
        settings = load_settings(config_path) if config_path else GeneratorSettings()
        overrides = {"schema_type": schema_type, "title": title, "version": doc_version}
        for name, value in overrides.items():
            if value is not None:
                setattr(settings, name, value)
        if groups:
            settings.api_group_names = list(groups)
        if llm_summaries:
            settings.operation_processors.append(LlmSummaryProcessor(model=model))

        click.echo(f"Reading endpoints from {manifest_path}...")
        endpoint_groups = _filter_endpoints(load_manifest(manifest_path), only)
        click.echo(f"Found {sum(len(g.endpoints) for g in endpoint_groups)} endpoints.")

        document = DocumentGenerator(settings).generate(endpoint_groups)
    except DocumentGenerationError as e:
        raise click.ClickException(str(e)) from e

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(dump(document, _output_format(output, fmt)), encoding="utf-8")
    click.echo(f"Document with {len(list(document.operations))} operations saved to {output}")


@main.command()
@click.argument("manifest_path", type=click.Path(exists=True, path_type=Path))
def inspect(manifest_path: Path):
    """List the endpoints of a manifest without generating a document."""
    try:
        endpoint_groups = load_manifest(manifest_path)
    except DocumentGenerationError as e:
        raise click.ClickException(str(e)) from e

    for group in endpoint_groups:
        if group.group_name:
            click.echo(f"[{group.group_name}]")
        for endpoint in group.endpoints:
            method, path = _endpoint_key(endpoint)
            click.echo(f"{method:<7} {path}  {endpoint.owner.name}.{endpoint.handler.name}")
