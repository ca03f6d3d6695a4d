import pytest

from api_doc_builder.document.models import (
    Annotation,
    Document,
    EndpointDescriptor,
    EndpointOwner,
    Handler,
)
from api_doc_builder.document.schema import SchemaResolver
from api_doc_builder.generator.operation import build_operation
from api_doc_builder.generator.pipeline import (
    collect_operation_processors,
    run_document_processors,
    run_operation_processors,
)
from api_doc_builder.generator.settings import GeneratorSettings
from api_doc_builder.processors.base import (
    DocumentProcessor,
    DocumentProcessorContext,
    OperationProcessor,
    OperationProcessorContext,
)


class Recorder(OperationProcessor):
    def __init__(self, label: str, log: list, result=True):
        self.label = label
        self.log = log
        self.result = result

    def process(self, context):
        self.log.append(self.label)
        return self.result


class AsyncRecorder(Recorder):
    async def process(self, context):
        self.log.append(self.label)
        return self.result


class MutateThenReject(OperationProcessor):
    def process(self, context):
        context.document.extension_data["touched"] = True
        return False


class DocumentRecorder(DocumentProcessor):
    def __init__(self, label: str, log: list):
        self.label = label
        self.log = log

    def process(self, context):
        self.log.append((self.label, [o.name for o in context.used_owners]))


def _make_context(settings_processors=(), owner_processors=(), handler_processors=()) -> OperationProcessorContext:
    owner = EndpointOwner(name="Users", annotations=[Annotation.operation_processor(p) for p in owner_processors])
    handler = Handler(name="Get", annotations=[Annotation.operation_processor(p) for p in handler_processors])
    endpoint = EndpointDescriptor(owner=owner, handler=handler, relative_path="users")
    document = Document()
    description = build_operation(document, endpoint)
    return OperationProcessorContext(
        document=document,
        operation_description=description,
        owner=owner,
        handler=handler,
        endpoint=endpoint,
        schema_resolver=SchemaResolver(document),
        settings=GeneratorSettings(operation_processors=list(settings_processors)),
        all_operations=[description],
    )


class TestOperationPipeline:
    @pytest.mark.asyncio
    async def test_precedence_settings_owner_handler(self):
        log: list = []
        context = _make_context(
            settings_processors=[Recorder("settings-1", log), Recorder("settings-2", log)],
            owner_processors=[Recorder("owner", log)],
            handler_processors=[Recorder("handler", log)],
        )
        assert await run_operation_processors(context) is True
        assert log == ["settings-1", "settings-2", "owner", "handler"]

    @pytest.mark.asyncio
    async def test_first_rejection_short_circuits(self):
        log: list = []
        context = _make_context(
            settings_processors=[Recorder("settings", log)],
            owner_processors=[Recorder("owner", log, result=False)],
            handler_processors=[Recorder("handler", log)],
        )
        assert await run_operation_processors(context) is False
        assert log == ["settings", "owner"]

    @pytest.mark.asyncio
    async def test_async_processors_awaited_in_order(self):
        log: list = []
        context = _make_context(
            settings_processors=[AsyncRecorder("a", log), Recorder("b", log), AsyncRecorder("c", log, result=False)],
            handler_processors=[Recorder("d", log)],
        )
        assert await run_operation_processors(context) is False
        assert log == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_none_result_keeps_operation(self):
        log: list = []
        context = _make_context(settings_processors=[Recorder("a", log, result=None)])
        assert await run_operation_processors(context) is True

    @pytest.mark.asyncio
    async def test_mutation_before_rejection_is_kept(self):
        context = _make_context(settings_processors=[MutateThenReject()])
        assert await run_operation_processors(context) is False
        assert context.document.extension_data == {"touched": True}

    def test_collect_order(self):
        a, b, c = Recorder("a", []), Recorder("b", []), Recorder("c", [])
        context = _make_context(settings_processors=[a], owner_processors=[b], handler_processors=[c])
        assert collect_operation_processors(context) == [a, b, c]


class TestDocumentPipeline:
    @pytest.mark.asyncio
    async def test_all_run_in_order(self):
        log: list = []
        document = Document()
        used = EndpointOwner(name="Users")
        context = DocumentProcessorContext(
            document=document,
            owners=[used, EndpointOwner(name="Unused")],
            used_owners=[used],
            schema_resolver=SchemaResolver(document),
            settings=GeneratorSettings(document_processors=[DocumentRecorder("one", log), DocumentRecorder("two", log)]),
        )
        await run_document_processors(context)
        assert log == [("one", ["Users"]), ("two", ["Users"])]
