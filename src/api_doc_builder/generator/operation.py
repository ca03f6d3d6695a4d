"""Operation builder — turns one endpoint descriptor into a draft operation."""

from api_doc_builder.document.models import (
    Document,
    EndpointDescriptor,
    EndpointOwner,
    Operation,
    OperationDescription,
    explicit_media_types,
)
from api_doc_builder.generator.operation_ids import disambiguate_operation_id

DEFAULT_METHOD = "get"


def is_owner_ignored(owner: EndpointOwner) -> bool:
    return owner.has("ignore")


def build_operation(document: Document, endpoint: EndpointDescriptor) -> OperationDescription | None:
    """Build a draft operation, or return None if the endpoint is ignored.

    The document is only read (for identifier collisions), never modified.
    """
    if is_owner_ignored(endpoint.owner) or endpoint.handler.has("ignore"):
        return None

    path = endpoint.relative_path
    if not path.startswith("/"):
        path = "/" + path

    method = (endpoint.http_method or DEFAULT_METHOD).lower()

    operation = Operation(
        operation_id=get_operation_id(document, endpoint),
        summary=_annotation_text(endpoint, "summary"),
        description=_annotation_text(endpoint, "description"),
        deprecated=endpoint.deprecated,
        consumes=explicit_media_types(endpoint.request_media_types),
        produces=explicit_media_types(endpoint.response_media_types),
    )
    return OperationDescription(path=path, method=method, operation=operation)


def get_operation_id(document: Document, endpoint: EndpointDescriptor) -> str:
    override = endpoint.handler.find("operation_id")
    if override is not None and override.value:
        base = str(override.value)
    else:
        base = f"{get_owner_name(endpoint.owner)}_{get_action_name(endpoint.handler.name)}"
    return disambiguate_operation_id(base, document.has_operation_id)


def get_owner_name(owner: EndpointOwner) -> str:
    name = owner.name
    if name.endswith("Controller") and len(name) > len("Controller"):
        name = name[: -len("Controller")]
    return name


def get_action_name(action_name: str) -> str:
    if action_name.endswith("Async"):
        action_name = action_name[: -len("Async")]
    return action_name


def _annotation_text(endpoint: EndpointDescriptor, kind: str) -> str:
    annotation = endpoint.handler.find(kind)
    return str(annotation.value) if annotation is not None and annotation.value else ""
