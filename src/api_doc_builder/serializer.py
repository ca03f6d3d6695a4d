"""Reading document templates and writing finished documents.

Swagger 2.0 output carries ``consumes``/``produces`` natively. OpenAPI 3
output moves the effective media types into ``requestBody`` and response
``content`` maps.
"""

import json

import yaml

from api_doc_builder.document.models import HTTP_METHODS, Document, Info, Operation, PathItem
from api_doc_builder.document.models import explicit_media_types, inherited_media_types

DEFAULT_MEDIA_TYPE = "application/json"


def dump(document: Document, fmt: str = "json") -> str:
    """Serialize the document as 'json' or 'yaml' text."""
    data = to_dict(document)
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def to_dict(document: Document) -> dict:
    swagger2 = document.schema_type == "swagger2"
    result: dict = {"swagger": "2.0"} if swagger2 else {"openapi": "3.0.3"}
    result["info"] = {k: v for k, v in document.info.model_dump().items() if v}
    result["info"].setdefault("title", "")
    result["info"].setdefault("version", "")
    if document.generator:
        result["x-generator"] = document.generator

    if swagger2:
        if document.consumes:
            result["consumes"] = list(document.consumes)
        if document.produces:
            result["produces"] = list(document.produces)

    result["paths"] = {
        path: {
            method: _operation_to_dict(operation, document, swagger2)
            for method, operation in item.operations.items()
        }
        for path, item in document.paths.items()
    }

    if document.tags:
        result["tags"] = list(document.tags)
    if swagger2:
        if document.definitions:
            result["definitions"] = dict(document.definitions)
        if document.security_definitions:
            result["securityDefinitions"] = dict(document.security_definitions)
    else:
        components = {}
        if document.definitions:
            components["schemas"] = dict(document.definitions)
        if document.security_definitions:
            components["securitySchemes"] = dict(document.security_definitions)
        if components:
            result["components"] = components
    if document.security:
        result["security"] = list(document.security)

    result.update(_extensions(document.extension_data))
    return result


def _operation_to_dict(operation: Operation, document: Document, swagger2: bool) -> dict:
    entry: dict = {}
    if operation.tags:
        entry["tags"] = list(operation.tags)
    if operation.summary:
        entry["summary"] = operation.summary
    if operation.description:
        entry["description"] = operation.description
    entry["operationId"] = operation.operation_id

    if swagger2:
        if not operation.consumes.is_inherited:
            entry["consumes"] = operation.consumes.resolve(document.consumes)
        if not operation.produces.is_inherited:
            entry["produces"] = operation.produces.resolve(document.produces)
        if operation.parameters:
            entry["parameters"] = list(operation.parameters)
        entry["responses"] = dict(operation.responses)
    else:
        consumes = operation.consumes.resolve(document.consumes) or [DEFAULT_MEDIA_TYPE]
        produces = operation.produces.resolve(document.produces) or [DEFAULT_MEDIA_TYPE]
        parameters = [p for p in operation.parameters if p.get("in") != "body"]
        body = next((p for p in operation.parameters if p.get("in") == "body"), None)
        if parameters:
            entry["parameters"] = parameters
        if body is not None:
            entry["requestBody"] = _content_entry(body, consumes, required=body.get("required", False))
        entry["responses"] = {
            status: _content_entry(response, produces) if "schema" in response else dict(response)
            for status, response in operation.responses.items()
        }

    if operation.deprecated:
        entry["deprecated"] = True
    if operation.security is not None:
        entry["security"] = list(operation.security)
    entry.update(_extensions(operation.extension_data))
    return entry


def _content_entry(source: dict, media_types: list[str], required: bool | None = None) -> dict:
    entry: dict = {}
    if source.get("description"):
        entry["description"] = source["description"]
    elif required is None:
        entry["description"] = ""
    if required:
        entry["required"] = True
    entry["content"] = {media_type: {"schema": source.get("schema", {})} for media_type in media_types}
    return entry


def _extensions(data: dict) -> dict:
    return {(key if key.startswith("x-") else f"x-{key}"): value for key, value in data.items()}


# -- templates ----------------------------------------------------------------


def load_template(text: str) -> Document:
    """Parse a JSON or YAML document template."""
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError("A document template must be a mapping")
    return from_dict(data)


def from_dict(data: dict) -> Document:
    swagger2 = "swagger" in data
    components = data.get("components") or {}
    info = data.get("info") or {}

    document = Document(
        schema_type="swagger2" if swagger2 else "openapi3",
        info=Info(
            title=info.get("title", ""),
            description=info.get("description", ""),
            version=str(info.get("version", "")),
        ),
        consumes=list(data.get("consumes") or []),
        produces=list(data.get("produces") or []),
        definitions=dict(data.get("definitions") or components.get("schemas") or {}),
        tags=list(data.get("tags") or []),
        security_definitions=dict(data.get("securityDefinitions") or components.get("securitySchemes") or {}),
        security=list(data.get("security") or []),
        extension_data={k: v for k, v in data.items() if k.startswith("x-") and k != "x-generator"},
    )

    for path, item in (data.get("paths") or {}).items():
        path_item = document.paths.setdefault(path, PathItem())
        for method, operation in (item or {}).items():
            if method in HTTP_METHODS:
                path_item.add(method, _operation_from_dict(operation or {}), path)
    return document


def _operation_from_dict(data: dict) -> Operation:
    return Operation(
        operation_id=data.get("operationId", ""),
        summary=data.get("summary", ""),
        description=data.get("description", ""),
        tags=list(data.get("tags") or []),
        deprecated=bool(data.get("deprecated", False)),
        consumes=explicit_media_types(data["consumes"]) if "consumes" in data else inherited_media_types(),
        produces=explicit_media_types(data["produces"]) if "produces" in data else inherited_media_types(),
        parameters=list(data.get("parameters") or []),
        responses=dict(data.get("responses") or {}),
        security=data.get("security"),
        extension_data={k: v for k, v in data.items() if k.startswith("x-")},
    )
