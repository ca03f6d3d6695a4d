"""Processor interfaces and the contexts handed to them.

An operation processor may inspect or rewrite a draft operation and returns
``True`` to keep it or ``False`` to drop it. A document processor runs once
per generation run, after every operation has been placed. Both may be
implemented with a plain ``def`` or an ``async def``.
"""

from dataclasses import dataclass, field
from typing import Any

from api_doc_builder.document.models import (
    Document,
    EndpointDescriptor,
    EndpointOwner,
    Handler,
    OperationDescription,
)
from api_doc_builder.document.schema import SchemaResolver


@dataclass
class OperationProcessorContext:
    document: Document
    operation_description: OperationDescription
    owner: EndpointOwner
    handler: Handler
    endpoint: EndpointDescriptor
    schema_resolver: SchemaResolver
    settings: Any
    # drafts built so far in the current owner group, this one included
    all_operations: list[OperationDescription] = field(default_factory=list)


@dataclass
class DocumentProcessorContext:
    document: Document
    owners: list[EndpointOwner]
    used_owners: list[EndpointOwner]
    schema_resolver: SchemaResolver
    settings: Any


class OperationProcessor:
    """Base class for per-operation pipeline steps."""

    def process(self, context: OperationProcessorContext):
        """Return True (or an awaitable resolving to True) to keep the operation."""
        raise NotImplementedError

    @property
    def name(self) -> str:
        return type(self).__name__


class DocumentProcessor:
    """Base class for document-level pipeline steps."""

    def process(self, context: DocumentProcessorContext):
        raise NotImplementedError

    @property
    def name(self) -> str:
        return type(self).__name__
