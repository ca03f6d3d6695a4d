"""Schema resolver — turns type references into reusable schema references.

Pydantic models and named manifest schemas are stored once in the
document's schema store and referenced by ``$ref``. Primitive types and
anonymous dict schemas are returned inline.
"""

import logging
from typing import Any, get_args

from pydantic import BaseModel, ConfigDict

from api_doc_builder.document.models import Document

logger = logging.getLogger(__name__)

PRIMITIVE_SCHEMAS = {
    str: {"type": "string"},
    int: {"type": "integer"},
    float: {"type": "number"},
    bool: {"type": "boolean"},
    bytes: {"type": "string", "format": "binary"},
    list: {"type": "array", "items": {}},
    dict: {"type": "object"},
}


class NamedSchema(BaseModel):
    """A JSON schema with a name, e.g. one declared in an endpoint manifest."""

    model_config = ConfigDict(frozen=True)

    name: str
    json_schema: dict = {}

    def __hash__(self) -> int:
        return hash(("NamedSchema", self.name))


class SchemaResolver:
    """Resolves type references against one document's schema store."""

    def __init__(self, document: Document):
        self.document = document
        self._names: dict[Any, str] = {}

    @property
    def ref_prefix(self) -> str:
        if self.document.schema_type == "swagger2":
            return "#/definitions/"
        return "#/components/schemas/"

    def has_schema(self, type_ref: Any) -> bool:
        return self._key(type_ref) in self._names

    def get_name(self, type_ref: Any) -> str | None:
        return self._names.get(self._key(type_ref))

    def resolve(self, type_ref: Any) -> dict:
        """Return a schema (or a ``$ref`` to a stored schema) for ``type_ref``."""
        if type_ref is None:
            return {}
        if isinstance(type_ref, dict):
            return dict(type_ref)
        if type_ref in PRIMITIVE_SCHEMAS:
            return dict(PRIMITIVE_SCHEMAS[type_ref])

        key = self._key(type_ref)
        if key in self._names:
            return self._ref(self._names[key])

        if isinstance(type_ref, NamedSchema):
            name = self._register(key, type_ref.name, type_ref.json_schema)
        elif isinstance(type_ref, type) and issubclass(type_ref, BaseModel):
            name = self._register_model(type_ref)
        else:
            raise TypeError(f"Cannot resolve a schema for {type_ref!r}")
        return self._ref(name)

    # -- helpers --------------------------------------------------------------

    def _register_model(self, model: type[BaseModel]) -> str:
        template = self.ref_prefix + "{model}"
        schema = model.model_json_schema(ref_template=template)
        nested = schema.pop("$defs", {})
        classes = _referenced_classes(model)

        renames: dict[str, str] = {}
        added: list[str] = []
        for def_name, def_schema in nested.items():
            cls = classes.get(def_name)
            key = self._key(cls) if cls is not None else ("def", def_name)
            if key in self._names:
                stored = self._names[key]
            else:
                stored = self._register(key, def_name, def_schema)
                added.append(stored)
            if stored != def_name:
                renames[def_name] = stored

        # self-referencing models come back as a bare $ref into their own $defs entry
        key = self._key(model)
        if key in self._names:
            name = self._names[key]
        else:
            name = self._register(key, model.__name__, schema)
            added.append(name)

        if renames:
            for stored in added:
                _rewrite_refs(self.document.definitions[stored], self.ref_prefix, renames)
        return name

    def _register(self, key: Any, preferred: str, schema: dict) -> str:
        name = preferred
        number = 1
        while name in self.document.definitions:
            number += 1
            name = f"{preferred}{number}"
        self.document.definitions[name] = schema
        self._names[key] = name
        logger.debug("Registered schema '%s'", name)
        return name

    def _ref(self, name: str) -> dict:
        return {"$ref": self.ref_prefix + name}

    @staticmethod
    def _key(type_ref: Any) -> Any:
        if isinstance(type_ref, NamedSchema):
            return ("named", type_ref.name)
        return type_ref


def _referenced_classes(model: type[BaseModel]) -> dict[str, type]:
    """Map class names to the classes reachable through ``model``'s fields."""
    found: dict[str, type] = {model.__name__: model}
    pending = [model]
    while pending:
        current = pending.pop()
        for field in current.model_fields.values():
            for cls in _annotation_classes(field.annotation):
                if cls.__name__ in found:
                    continue
                found[cls.__name__] = cls
                if issubclass(cls, BaseModel):
                    pending.append(cls)
    return found


def _annotation_classes(annotation: Any):
    args = get_args(annotation)
    if args:
        for arg in args:
            yield from _annotation_classes(arg)
    elif isinstance(annotation, type) and annotation.__module__ != "builtins":
        yield annotation


def _rewrite_refs(node: Any, prefix: str, renames: dict[str, str]) -> None:
    if isinstance(node, dict):
        ref = node.get("$ref")
        if isinstance(ref, str) and ref.startswith(prefix) and ref[len(prefix):] in renames:
            node["$ref"] = prefix + renames[ref[len(prefix):]]
        for value in node.values():
            _rewrite_refs(value, prefix, renames)
    elif isinstance(node, list):
        for item in node:
            _rewrite_refs(item, prefix, renames)
