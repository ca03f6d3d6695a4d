"""Operation summaries written by an LLM."""

import logging

from api_doc_builder.llm import LlmClient
from api_doc_builder.processors.base import OperationProcessor, OperationProcessorContext

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You write API reference documentation. Reply with a single short sentence "
    "summarizing what the described HTTP operation does. No markdown, no quotes."
)


class LlmSummaryProcessor(OperationProcessor):
    """Fills in a missing operation summary. Never drops an operation."""

    def __init__(self, model: str | None = None):
        self.client = LlmClient(model=model)

    async def process(self, context: OperationProcessorContext) -> bool:
        description = context.operation_description
        operation = description.operation
        if operation.summary:
            return True

        user_prompt = (
            f"{description.method.upper()} {description.path}\n"
            f"Handler: {context.owner.name}.{context.handler.name}\n"
            f"Operation id: {operation.operation_id}\n"
            f"Parameters: {[p.get('name') for p in operation.parameters]}\n"
            f"Responses: {sorted(operation.responses)}"
        )
        summary = await self.client.acall(system=SYSTEM_PROMPT, user=user_prompt)
        text = (summary or "").strip()
        operation.summary = text.splitlines()[0] if text else ""
        logger.debug("Summary for %s: %s", operation.operation_id, operation.summary)
        return True
