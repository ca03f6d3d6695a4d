"""Data models for discovered endpoints and the assembled API document.

Endpoint descriptors are produced by a discovery provider and are immutable.
The document models are mutated while a generation run assembles them.
"""

from collections.abc import Iterator
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from api_doc_builder.errors import ConfigurationConflictError

TOOLCHAIN_VERSION = "0.1.0"

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

SchemaType = Literal["openapi3", "swagger2"]


# -- discovery input ----------------------------------------------------------


class Annotation(BaseModel):
    """A pre-extracted marker attached to an owner or a handler."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: str  # ignore / operation_id / operation_processor / api_version / tags / summary / description
    value: Any = None

    def __hash__(self) -> int:
        return hash((self.kind, repr(self.value)))

    @classmethod
    def ignore(cls) -> "Annotation":
        return cls(kind="ignore", value=True)

    @classmethod
    def operation_id(cls, operation_id: str) -> "Annotation":
        return cls(kind="operation_id", value=operation_id)

    @classmethod
    def operation_processor(cls, processor: Any) -> "Annotation":
        return cls(kind="operation_processor", value=processor)


class _Annotated(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    annotations: tuple[Annotation, ...] = ()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.name))

    def has(self, kind: str) -> bool:
        return any(a.kind == kind for a in self.annotations)

    def find(self, kind: str) -> Annotation | None:
        """Return the first annotation of the given kind, or None."""
        for annotation in self.annotations:
            if annotation.kind == kind:
                return annotation
        return None

    def find_all(self, kind: str) -> list[Annotation]:
        return [a for a in self.annotations if a.kind == kind]


class EndpointOwner(_Annotated):
    """The logical handler group (e.g. a controller) declaring endpoints."""


class Handler(_Annotated):
    """A single action on an owner."""


class ParameterDescriptor(BaseModel):
    """A parameter declared by an endpoint (query, path, header, cookie, body)."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    location: str = "query"  # query / path / header / cookie / body
    required: bool = False
    type_ref: Any = None
    description: str = ""


class ResponseDescriptor(BaseModel):
    """A response declared by an endpoint."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status_code: str = "200"
    description: str = ""
    type_ref: Any = None
    media_types: tuple[str, ...] = ()


class EndpointDescriptor(BaseModel):
    """One reachable operation as reported by endpoint discovery."""

    model_config = ConfigDict(frozen=True)

    owner: EndpointOwner
    handler: Handler
    relative_path: str
    http_method: str | None = None
    request_media_types: tuple[str, ...] = ()
    parameters: tuple[ParameterDescriptor, ...] = ()
    responses: tuple[ResponseDescriptor, ...] = ()
    deprecated: bool = False
    group_name: str | None = None

    @property
    def response_media_types(self) -> list[str]:
        return _distinct(t for r in self.responses for t in r.media_types)


class EndpointGroup(BaseModel):
    """A named discovery group (an API group) and its endpoints."""

    group_name: str | None = None
    endpoints: list[EndpointDescriptor] = []


# -- document -----------------------------------------------------------------


class ExplicitMediaTypes(BaseModel):
    """The operation declares its own media types."""

    kind: Literal["explicit"] = "explicit"
    types: list[str] = []

    @property
    def is_inherited(self) -> bool:
        return False

    def resolve(self, default: list[str]) -> list[str]:
        return list(self.types)


class InheritedMediaTypes(BaseModel):
    """The operation uses the document-wide default media types."""

    kind: Literal["inherited"] = "inherited"

    @property
    def is_inherited(self) -> bool:
        return True

    def resolve(self, default: list[str]) -> list[str]:
        return list(default)


MediaTypes = Annotated[Union[ExplicitMediaTypes, InheritedMediaTypes], Field(discriminator="kind")]


def explicit_media_types(types) -> ExplicitMediaTypes:
    return ExplicitMediaTypes(types=_distinct(types))


def inherited_media_types() -> InheritedMediaTypes:
    return InheritedMediaTypes()


class Operation(BaseModel):
    """A single verb+path operation in the document."""

    operation_id: str = ""
    summary: str = ""
    description: str = ""
    tags: list[str] = []
    deprecated: bool = False
    consumes: MediaTypes = Field(default_factory=ExplicitMediaTypes)
    produces: MediaTypes = Field(default_factory=ExplicitMediaTypes)
    parameters: list[dict] = []
    responses: dict = {}  # {status_code: {description, schema}}
    security: list[dict] | None = None
    extension_data: dict = {}


class OperationDescription(BaseModel):
    """An operation together with the path and method it is placed under."""

    path: str
    method: str
    operation: Operation


class PathItem(BaseModel):
    """Operations of one path, keyed by lowercase HTTP method."""

    operations: dict[str, Operation] = {}

    def __contains__(self, method: str) -> bool:
        return method in self.operations

    def add(self, method: str, operation: Operation, path: str = "") -> None:
        if method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method '{method}' on path '{path}'")
        if method in self.operations:
            raise ConfigurationConflictError(method, path)
        self.operations[method] = operation


class Info(BaseModel):
    title: str = ""
    description: str = ""
    version: str = ""


class Document(BaseModel):
    """The API description document assembled by a generation run."""

    generator: str = ""
    schema_type: SchemaType = "openapi3"
    info: Info = Field(default_factory=Info)
    paths: dict[str, PathItem] = {}
    consumes: list[str] = []
    produces: list[str] = []
    definitions: dict[str, dict] = {}  # schema store, owned by SchemaResolver
    tags: list[dict] = []
    security_definitions: dict[str, dict] = {}
    security: list[dict] = []
    extension_data: dict = {}

    @property
    def operations(self) -> Iterator[OperationDescription]:
        """Iterate placed operations in insertion order."""
        for path, item in self.paths.items():
            for method, operation in item.operations.items():
                yield OperationDescription(path=path, method=method, operation=operation)

    def has_operation_id(self, operation_id: str) -> bool:
        return any(
            op.operation_id == operation_id
            for item in self.paths.values()
            for op in item.operations.values()
        )


def _distinct(values) -> list[str]:
    result: list[str] = []
    for value in values:
        if value not in result:
            result.append(value)
    return result
