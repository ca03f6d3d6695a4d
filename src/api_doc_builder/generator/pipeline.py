"""Operation and document processor pipelines."""

import inspect
import logging

from api_doc_builder.processors.base import DocumentProcessorContext, OperationProcessorContext

logger = logging.getLogger(__name__)


async def _invoke(processor, context):
    result = processor.process(context)
    if inspect.isawaitable(result):
        result = await result
    return result


def collect_operation_processors(context: OperationProcessorContext) -> list:
    """Settings processors first, then owner annotations, then handler annotations."""
    processors = list(context.settings.operation_processors)
    for annotated in (context.owner, context.handler):
        processors.extend(a.value for a in annotated.find_all("operation_processor"))
    return processors


async def run_operation_processors(context: OperationProcessorContext) -> bool:
    """Run the operation pipeline; the first processor returning False drops the operation.

    Document changes a processor made before rejecting are kept.
    """
    for processor in collect_operation_processors(context):
        if await _invoke(processor, context) is False:
            logger.debug(
                "%s rejected %s %s (%s.%s)",
                _name(processor),
                context.operation_description.method.upper(),
                context.operation_description.path,
                context.owner.name,
                context.handler.name,
            )
            return False
    return True


async def run_document_processors(context: DocumentProcessorContext) -> None:
    for processor in context.settings.document_processors:
        logger.debug("Running document processor %s", _name(processor))
        await _invoke(processor, context)


def _name(processor) -> str:
    return getattr(processor, "name", None) or type(processor).__name__
