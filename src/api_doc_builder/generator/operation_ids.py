"""Operation identifier disambiguation."""

from collections.abc import Callable

from api_doc_builder.document.models import Document


def disambiguate_operation_id(base: str, is_taken: Callable[[str], bool]) -> str:
    """Return the first free identifier of ``base``, ``base_2``, ``base3``, ``base4``..."""
    if not is_taken(base):
        return base
    number = 2
    candidate = f"{base}_{number}"
    while is_taken(candidate):
        number += 1
        candidate = f"{base}{number}"
    return candidate


def generate_operation_ids(document: Document) -> None:
    """Make every operation identifier in the document non-empty and unique.

    Operations are visited in document order; the first holder of an
    identifier keeps it and later duplicates are renamed.
    """
    descriptions = list(document.operations)
    taken = {d.operation.operation_id for d in descriptions if d.operation.operation_id}
    seen: set[str] = set()

    for description in descriptions:
        operation = description.operation
        if not operation.operation_id:
            base = _path_operation_id(description.path, description.method)
            operation.operation_id = disambiguate_operation_id(base, taken.__contains__)
            taken.add(operation.operation_id)
        elif operation.operation_id in seen:
            operation.operation_id = disambiguate_operation_id(operation.operation_id, taken.__contains__)
            taken.add(operation.operation_id)
        seen.add(operation.operation_id)


def _path_operation_id(path: str, method: str) -> str:
    parts = [segment.strip("{}") for segment in path.split("/") if segment]
    base = "".join(part[:1].upper() + part[1:] for part in parts) or "Root"
    return f"{base}_{method.capitalize()}"
