"""Built-in operation processors."""

import logging

from api_doc_builder.generator.operation import get_owner_name
from api_doc_builder.processors.base import OperationProcessor, OperationProcessorContext

logger = logging.getLogger(__name__)


class OperationParameterProcessor(OperationProcessor):
    """Adds the endpoint's declared parameters, resolving their schemas."""

    def process(self, context: OperationProcessorContext) -> bool:
        swagger2 = context.document.schema_type == "swagger2"
        parameters = []
        for param in context.endpoint.parameters:
            schema = context.schema_resolver.resolve(param.type_ref)
            entry = {
                "name": param.name,
                "in": param.location,
                "required": param.required or param.location == "path",
            }
            if param.description:
                entry["description"] = param.description
            if swagger2 and param.location != "body" and "$ref" not in schema:
                # swagger 2.0 only allows a schema object on body parameters
                entry.update(schema or {"type": "string"})
            else:
                entry["schema"] = schema
            parameters.append(entry)

        context.operation_description.operation.parameters.extend(parameters)
        return True


class OperationResponseProcessor(OperationProcessor):
    """Adds the endpoint's declared responses, resolving their schemas."""

    def process(self, context: OperationProcessorContext) -> bool:
        responses = context.operation_description.operation.responses
        for response in context.endpoint.responses:
            entry = {"description": response.description}
            if response.type_ref is not None:
                entry["schema"] = context.schema_resolver.resolve(response.type_ref)
            responses[str(response.status_code)] = entry
        return True


class OperationTagsProcessor(OperationProcessor):
    """Tags operations from ``tags`` annotations, falling back to the owner name."""

    def process(self, context: OperationProcessorContext) -> bool:
        operation = context.operation_description.operation
        tags = _annotated_tags(context.handler) or _annotated_tags(context.owner)
        if not tags and not operation.tags:
            tags = [get_owner_name(context.owner)]
        for tag in tags:
            if tag not in operation.tags:
                operation.tags.append(tag)
        return True


class ApiVersionProcessor(OperationProcessor):
    """Drops operations whose ``api_version`` annotation is not included.

    Operations without a version annotation are always kept.
    """

    def __init__(self, include_versions: list[str] | None = None):
        self.include_versions = [str(v) for v in include_versions or []]

    def process(self, context: OperationProcessorContext) -> bool:
        if not self.include_versions:
            return True
        annotation = context.handler.find("api_version") or context.owner.find("api_version")
        if annotation is None:
            return True
        versions = annotation.value if isinstance(annotation.value, (list, tuple)) else [annotation.value]
        if any(str(v) in self.include_versions for v in versions):
            return True
        logger.debug(
            "Excluding %s: api version %s not in %s",
            context.operation_description.operation.operation_id,
            versions,
            self.include_versions,
        )
        return False


def _annotated_tags(annotated) -> list[str]:
    tags: list[str] = []
    for annotation in annotated.find_all("tags"):
        values = annotation.value if isinstance(annotation.value, (list, tuple)) else [annotation.value]
        tags.extend(str(v) for v in values)
    return tags
