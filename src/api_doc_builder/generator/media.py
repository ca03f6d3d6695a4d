"""Cross-operation media type aggregation."""

from api_doc_builder.document.models import (
    Document,
    OperationDescription,
    explicit_media_types,
    inherited_media_types,
)


def update_consumes_and_produces(document: Document, placed: list[OperationDescription]) -> None:
    """Promote media types shared by every placed operation to the document.

    The defaults are computed from the operations' original lists before any
    operation is rewritten. An operation whose list adds nothing beyond the
    default then inherits it.
    """
    consumes = [d.operation.consumes.resolve(document.consumes) for d in placed]
    produces = [d.operation.produces.resolve(document.produces) for d in placed]

    document.consumes = _shared_by_all(consumes)
    document.produces = _shared_by_all(produces)

    for description, own_consumes, own_produces in zip(placed, consumes, produces):
        operation = description.operation
        operation.consumes = _own_or_inherited(own_consumes, document.consumes)
        operation.produces = _own_or_inherited(own_produces, document.produces)


def _shared_by_all(lists: list[list[str]]) -> list[str]:
    shared: list[str] = []
    for values in lists:
        for value in values:
            if value not in shared and all(value in other for other in lists):
                shared.append(value)
    return shared


def _own_or_inherited(values: list[str], default: list[str]):
    if any(value not in default for value in values):
        return explicit_media_types(values)
    return inherited_media_types()
