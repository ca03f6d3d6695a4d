from pydantic import BaseModel

from api_doc_builder.document.models import (
    Annotation,
    Document,
    EndpointDescriptor,
    EndpointOwner,
    Handler,
    ParameterDescriptor,
    ResponseDescriptor,
)
from api_doc_builder.document.schema import SchemaResolver
from api_doc_builder.generator.operation import build_operation
from api_doc_builder.generator.settings import GeneratorSettings
from api_doc_builder.processors.base import DocumentProcessorContext, OperationProcessorContext
from api_doc_builder.processors.document import DocumentTagsProcessor, SecurityDefinitionAppender
from api_doc_builder.processors.operation import (
    ApiVersionProcessor,
    OperationParameterProcessor,
    OperationResponseProcessor,
    OperationTagsProcessor,
)


class Pet(BaseModel):
    name: str


def _make_context(endpoint: EndpointDescriptor, document: Document | None = None) -> OperationProcessorContext:
    document = document or Document()
    description = build_operation(document, endpoint)
    return OperationProcessorContext(
        document=document,
        operation_description=description,
        owner=endpoint.owner,
        handler=endpoint.handler,
        endpoint=endpoint,
        schema_resolver=SchemaResolver(document),
        settings=GeneratorSettings(),
        all_operations=[description],
    )


def _make_endpoint(owner_annotations=(), handler_annotations=(), **overrides) -> EndpointDescriptor:
    defaults = dict(
        owner=EndpointOwner(name="PetsController", annotations=owner_annotations),
        handler=Handler(name="Get", annotations=handler_annotations),
        relative_path="pets/{id}",
    )
    defaults.update(overrides)
    return EndpointDescriptor(**defaults)


def _document_context(document: Document, used: list[EndpointOwner]) -> DocumentProcessorContext:
    return DocumentProcessorContext(
        document=document,
        owners=list(used),
        used_owners=list(used),
        schema_resolver=SchemaResolver(document),
        settings=GeneratorSettings(),
    )


class TestOperationParameterProcessor:
    def test_openapi3_parameters_use_schema(self):
        context = _make_context(_make_endpoint(parameters=[
            ParameterDescriptor(name="id", location="path", type_ref=int),
            ParameterDescriptor(name="q", location="query", type_ref=str, description="Search"),
            ParameterDescriptor(name="pet", location="body", required=True, type_ref=Pet),
        ]))
        assert OperationParameterProcessor().process(context) is True

        params = context.operation_description.operation.parameters
        assert params[0] == {"name": "id", "in": "path", "required": True, "schema": {"type": "integer"}}
        assert params[1] == {"name": "q", "in": "query", "required": False, "description": "Search", "schema": {"type": "string"}}
        assert params[2]["schema"] == {"$ref": "#/components/schemas/Pet"}
        assert "Pet" in context.document.definitions

    def test_swagger2_inlines_primitive_types(self):
        document = Document(schema_type="swagger2")
        context = _make_context(_make_endpoint(parameters=[
            ParameterDescriptor(name="limit", location="query", type_ref=int),
            ParameterDescriptor(name="pet", location="body", type_ref=Pet),
        ]), document)
        OperationParameterProcessor().process(context)

        params = context.operation_description.operation.parameters
        assert params[0] == {"name": "limit", "in": "query", "required": False, "type": "integer"}
        assert params[1]["schema"] == {"$ref": "#/definitions/Pet"}


class TestOperationResponseProcessor:
    def test_responses_added(self):
        context = _make_context(_make_endpoint(responses=[
            ResponseDescriptor(status_code="200", description="A pet", type_ref=Pet),
            ResponseDescriptor(status_code="404", description="Not found"),
        ]))
        assert OperationResponseProcessor().process(context) is True

        responses = context.operation_description.operation.responses
        assert responses["200"] == {"description": "A pet", "schema": {"$ref": "#/components/schemas/Pet"}}
        assert responses["404"] == {"description": "Not found"}


class TestOperationTagsProcessor:
    def test_defaults_to_owner_name(self):
        context = _make_context(_make_endpoint())
        OperationTagsProcessor().process(context)
        assert context.operation_description.operation.tags == ["Pets"]

    def test_handler_tags_win(self):
        context = _make_context(_make_endpoint(
            owner_annotations=[Annotation(kind="tags", value=["owner"])],
            handler_annotations=[Annotation(kind="tags", value=["a", "b"])],
        ))
        OperationTagsProcessor().process(context)
        assert context.operation_description.operation.tags == ["a", "b"]

    def test_owner_tags(self):
        context = _make_context(_make_endpoint(owner_annotations=[Annotation(kind="tags", value="animals")]))
        OperationTagsProcessor().process(context)
        assert context.operation_description.operation.tags == ["animals"]


class TestApiVersionProcessor:
    def test_keeps_unversioned(self):
        context = _make_context(_make_endpoint())
        assert ApiVersionProcessor(["1"]).process(context) is True

    def test_keeps_included_version(self):
        context = _make_context(_make_endpoint(handler_annotations=[Annotation(kind="api_version", value="1")]))
        assert ApiVersionProcessor(["1"]).process(context) is True

    def test_rejects_other_version(self):
        context = _make_context(_make_endpoint(owner_annotations=[Annotation(kind="api_version", value=2)]))
        assert ApiVersionProcessor(["1"]).process(context) is False

    def test_version_list(self):
        context = _make_context(_make_endpoint(owner_annotations=[Annotation(kind="api_version", value=["1", "2"])]))
        assert ApiVersionProcessor(["2"]).process(context) is True

    def test_no_filter_keeps_all(self):
        context = _make_context(_make_endpoint(owner_annotations=[Annotation(kind="api_version", value="3")]))
        assert ApiVersionProcessor().process(context) is True


class TestSecurityDefinitionAppender:
    def test_registers_scheme_once(self):
        document = Document()
        processor = SecurityDefinitionAppender("bearer", {"type": "http", "scheme": "bearer"}, ["read"])
        processor.process(_document_context(document, []))
        processor.process(_document_context(document, []))
        assert document.security_definitions == {"bearer": {"type": "http", "scheme": "bearer"}}
        assert document.security == [{"bearer": ["read"]}]


class TestDocumentTagsProcessor:
    def test_tags_for_used_owners(self):
        document = Document(tags=[{"name": "Users", "description": "existing"}])
        owners = [
            EndpointOwner(name="UsersController"),
            EndpointOwner(name="PetsController", annotations=[Annotation(kind="description", value="Pets!")]),
            EndpointOwner(name="Orders"),
        ]
        DocumentTagsProcessor({"Orders": "All orders"}).process(_document_context(document, owners))
        assert document.tags == [
            {"name": "Users", "description": "existing"},
            {"name": "Pets", "description": "Pets!"},
            {"name": "Orders", "description": "All orders"},
        ]
