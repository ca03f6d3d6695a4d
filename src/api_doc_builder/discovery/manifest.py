"""Endpoint manifest reader.

Stands in for host-framework discovery: a YAML (or JSON) file lists groups,
owners and their endpoints, and is converted into EndpointGroup models.

    schemas:
      Pet: {type: object, properties: {name: {type: string}}}
    groups:
      - name: v1
        owners:
          - name: PetsController
            tags: [pets]
            endpoints:
              - handler: GetPetAsync
                path: api/pets/{id}
                method: GET
                parameters:
                  - {name: id, in: path, type: integer}
                responses:
                  - {status: 200, type: Pet, media_types: [application/json]}

A top-level ``owners`` list is read as a single unnamed group.
"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from api_doc_builder.document.models import (
    Annotation,
    EndpointDescriptor,
    EndpointGroup,
    EndpointOwner,
    Handler,
    ParameterDescriptor,
    ResponseDescriptor,
)
from api_doc_builder.document.schema import NamedSchema
from api_doc_builder.errors import ManifestError, SettingsError
from api_doc_builder.generator.settings import build_processor

logger = logging.getLogger(__name__)

PRIMITIVE_TYPES = {
    "string": str,
    "integer": int,
    "number": float,
    "boolean": bool,
    "file": bytes,
    "array": list,
    "object": dict,
}

ANNOTATION_KEYS = ("operation_id", "api_version", "tags", "summary", "description")


def load_manifest(file_path: Path) -> list[EndpointGroup]:
    """Read an endpoint manifest file into discovery groups."""
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ManifestError(f"Cannot read manifest {file_path}: {e}") from e
    if not isinstance(data, dict):
        raise ManifestError(f"Manifest {file_path} must be a mapping")

    groups = parse_manifest(data)
    logger.info(
        "Loaded %d endpoints in %d groups from %s",
        sum(len(g.endpoints) for g in groups),
        len(groups),
        file_path,
    )
    return groups


def parse_manifest(data: dict) -> list[EndpointGroup]:
    raw_groups = data.get("groups")
    if raw_groups is None:
        raw_groups = [{"name": None, "owners": data.get("owners") or []}]

    try:
        schemas = {
            name: NamedSchema(name=name, json_schema=schema or {})
            for name, schema in (data.get("schemas") or {}).items()
        }
        return [_parse_group(group, schemas) for group in raw_groups]
    except (AttributeError, KeyError, TypeError, ValidationError, SettingsError) as e:
        raise ManifestError(f"Malformed manifest: {e}") from e


def _parse_group(group: dict, schemas: dict) -> EndpointGroup:
    name = group.get("name")
    endpoints = []
    for raw_owner in group.get("owners") or []:
        owner = EndpointOwner(name=raw_owner["name"], annotations=_annotations(raw_owner))
        for raw_endpoint in raw_owner.get("endpoints") or []:
            endpoints.append(_parse_endpoint(raw_endpoint, owner, name, schemas))
    return EndpointGroup(group_name=name, endpoints=endpoints)


def _parse_endpoint(data: dict, owner: EndpointOwner, group_name: str | None, schemas: dict) -> EndpointDescriptor:
    return EndpointDescriptor(
        owner=owner,
        handler=Handler(name=data["handler"], annotations=_annotations(data)),
        relative_path=data["path"],
        http_method=data.get("method"),
        request_media_types=tuple(data.get("consumes") or ()),
        parameters=tuple(_parse_parameter(p, schemas) for p in data.get("parameters") or []),
        responses=tuple(_parse_response(r, schemas) for r in data.get("responses") or []),
        deprecated=bool(data.get("deprecated", False)),
        group_name=group_name,
    )


def _parse_parameter(data: dict, schemas: dict) -> ParameterDescriptor:
    return ParameterDescriptor(
        name=data["name"],
        location=data.get("in", "query"),
        required=bool(data.get("required", False)),
        type_ref=_type_ref(data.get("type"), schemas),
        description=data.get("description", ""),
    )


def _parse_response(data: dict, schemas: dict) -> ResponseDescriptor:
    return ResponseDescriptor(
        status_code=str(data.get("status", "200")),
        description=data.get("description", ""),
        type_ref=_type_ref(data.get("type"), schemas),
        media_types=tuple(data.get("media_types") or ()),
    )


def _type_ref(name, schemas: dict):
    if name is None:
        return None
    if isinstance(name, dict):
        return name
    if name in schemas:
        return schemas[name]
    if name in PRIMITIVE_TYPES:
        return PRIMITIVE_TYPES[name]
    raise ManifestError(f"Unknown type '{name}'")


def _annotations(data: dict) -> tuple[Annotation, ...]:
    annotations = []
    if data.get("ignore"):
        annotations.append(Annotation.ignore())
    for key in ANNOTATION_KEYS:
        if data.get(key) is not None:
            annotations.append(Annotation(kind=key, value=data[key]))
    for spec in data.get("processors") or []:
        annotations.append(Annotation.operation_processor(build_processor(spec)))
    return tuple(annotations)
