"""Document generator — assembles discovered endpoints into one API document.

A run goes through these phases in order:

1. create the document (fresh or cloned from a template)
2. group the endpoints by owner, keeping discovery order
3. per owner: build each operation, run the operation processors, place it
4. promote shared media types and make operation ids unique
5. run the document processors and the post-process hook

Placement is sequential so identifiers and path conflicts only depend on
discovery order.
"""

import asyncio
import logging
import re
from collections.abc import Iterable

import pydantic
import yaml

from api_doc_builder.document.models import (
    TOOLCHAIN_VERSION,
    Document,
    EndpointDescriptor,
    EndpointGroup,
    EndpointOwner,
    OperationDescription,
    PathItem,
)
from api_doc_builder.document.schema import SchemaResolver
from api_doc_builder.generator.media import update_consumes_and_produces
from api_doc_builder.generator.operation import build_operation, is_owner_ignored
from api_doc_builder.generator.operation_ids import generate_operation_ids
from api_doc_builder.generator.pipeline import run_document_processors, run_operation_processors
from api_doc_builder.errors import SettingsError
from api_doc_builder.generator.settings import GeneratorSettings
from api_doc_builder.processors.base import DocumentProcessorContext, OperationProcessorContext
from api_doc_builder.serializer import load_template

logger = logging.getLogger(__name__)


class DocumentGenerator:
    """Generates a :class:`Document` from discovered endpoint groups."""

    def __init__(self, settings: GeneratorSettings | None = None):
        self.settings = settings or GeneratorSettings()

    def generate(self, groups: Iterable[EndpointGroup | EndpointDescriptor]) -> Document:
        """Synchronous wrapper around :meth:`generate_async`."""
        return asyncio.run(self.generate_async(groups))

    async def generate_async(self, groups: Iterable[EndpointGroup | EndpointDescriptor]) -> Document:
        endpoints = self._select_endpoints(groups)

        document = self.create_document()
        schema_resolver = SchemaResolver(document)

        by_owner = _group_by_owner(endpoints)
        placed: list[OperationDescription] = []
        used_owners: list[EndpointOwner] = []
        for owner, owner_endpoints in by_owner.items():
            added = await self._generate_for_owner(document, owner, owner_endpoints, schema_resolver)
            if added:
                used_owners.append(owner)
            placed.extend(added)

        update_consumes_and_produces(document, placed)
        generate_operation_ids(document)

        context = DocumentProcessorContext(
            document=document,
            owners=list(by_owner),
            used_owners=used_owners,
            schema_resolver=schema_resolver,
            settings=self.settings,
        )
        await run_document_processors(context)

        if self.settings.post_process is not None:
            self.settings.post_process(document)

        logger.info(
            "Generated document with %d operations from %d of %d owners",
            len(placed),
            len(used_owners),
            len(by_owner),
        )
        return document

    def create_document(self) -> Document:
        template = self.settings.document_template
        if isinstance(template, Document):
            document = template.model_copy(deep=True)
        elif template:
            try:
                document = load_template(template)
            except (yaml.YAMLError, AttributeError, TypeError, ValueError) as e:
                raise SettingsError(f"Invalid document template: {e}") from e
        else:
            document = Document()

        document.generator = f"api-doc-builder v{TOOLCHAIN_VERSION} (pydantic v{pydantic.VERSION})"
        document.schema_type = self.settings.schema_type

        if not template:
            for field in ("title", "description", "version"):
                value = getattr(self.settings, field)
                if value and not getattr(document.info, field):
                    setattr(document.info, field, value)
        return document

    # -- helpers --------------------------------------------------------------

    def _select_endpoints(self, groups) -> list[EndpointDescriptor]:
        """Flatten discovery groups, keeping only the configured group names."""
        names = self.settings.api_group_names
        endpoints: list[EndpointDescriptor] = []
        for group in groups:
            if isinstance(group, EndpointDescriptor):
                if not names or group.group_name in names:
                    endpoints.append(group)
            elif not names or group.group_name in names:
                endpoints.extend(group.endpoints)
        return endpoints

    async def _generate_for_owner(
        self,
        document: Document,
        owner: EndpointOwner,
        endpoints: list[EndpointDescriptor],
        schema_resolver: SchemaResolver,
    ) -> list[OperationDescription]:
        if is_owner_ignored(owner):
            logger.debug("Skipping ignored owner %s", owner.name)
            return []

        all_operations: list[OperationDescription] = []
        added: list[OperationDescription] = []
        for endpoint in endpoints:
            description = build_operation(document, endpoint)
            if description is None:
                logger.debug("Skipping ignored handler %s.%s", owner.name, endpoint.handler.name)
                continue
            all_operations.append(description)

            context = OperationProcessorContext(
                document=document,
                operation_description=description,
                owner=owner,
                handler=endpoint.handler,
                endpoint=endpoint,
                schema_resolver=schema_resolver,
                settings=self.settings,
                all_operations=all_operations,
            )
            if await run_operation_processors(context):
                _place(document, description)
                added.append(description)
        return added


def _group_by_owner(endpoints: list[EndpointDescriptor]) -> dict[EndpointOwner, list[EndpointDescriptor]]:
    groups: dict[EndpointOwner, list[EndpointDescriptor]] = {}
    for endpoint in endpoints:
        groups.setdefault(endpoint.owner, []).append(endpoint)
    return groups


def _place(document: Document, description: OperationDescription) -> None:
    path = re.sub(r"/{2,}", "/", description.path)
    description.path = path
    path_item = document.paths.setdefault(path, PathItem())
    path_item.add(description.method, description.operation, path)
    logger.debug("Placed %s %s as %s", description.method.upper(), path, description.operation.operation_id)
