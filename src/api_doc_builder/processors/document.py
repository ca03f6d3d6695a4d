"""Built-in document processors."""

from api_doc_builder.generator.operation import get_owner_name
from api_doc_builder.processors.base import DocumentProcessor, DocumentProcessorContext


class SecurityDefinitionAppender(DocumentProcessor):
    """Registers a security scheme and requires it for the whole document."""

    def __init__(self, name: str, scheme: dict, scopes: list[str] | None = None):
        self.scheme_name = name
        self.scheme = scheme
        self.scopes = list(scopes or [])

    def process(self, context: DocumentProcessorContext) -> None:
        document = context.document
        document.security_definitions[self.scheme_name] = dict(self.scheme)
        requirement = {self.scheme_name: list(self.scopes)}
        if requirement not in document.security:
            document.security.append(requirement)


class DocumentTagsProcessor(DocumentProcessor):
    """Adds one document tag per owner that contributed an operation."""

    def __init__(self, descriptions: dict[str, str] | None = None):
        self.descriptions = descriptions or {}

    def process(self, context: DocumentProcessorContext) -> None:
        existing = {tag.get("name") for tag in context.document.tags}
        for owner in context.used_owners:
            name = get_owner_name(owner)
            if name in existing:
                continue
            tag = {"name": name}
            description = self.descriptions.get(name) or _annotation_text(owner, "description")
            if description:
                tag["description"] = description
            context.document.tags.append(tag)
            existing.add(name)


def _annotation_text(owner, kind: str) -> str:
    annotation = owner.find(kind)
    return str(annotation.value) if annotation is not None and annotation.value else ""
