import json

import yaml

from api_doc_builder.document.models import (
    Document,
    Info,
    Operation,
    PathItem,
    explicit_media_types,
    inherited_media_types,
)
from api_doc_builder.serializer import dump, from_dict, load_template, to_dict


def _document(schema_type: str = "openapi3") -> Document:
    document = Document(
        schema_type=schema_type,
        generator="gen",
        info=Info(title="Pets", version="1.0"),
        consumes=["application/json"],
        produces=["application/json"],
        definitions={"Pet": {"type": "object"}},
    )
    document.paths["/pets"] = PathItem()
    document.paths["/pets"].add("post", Operation(
        operation_id="Pets_Create",
        tags=["Pets"],
        consumes=explicit_media_types(["application/json", "application/xml"]),
        produces=inherited_media_types(),
        parameters=[
            {"name": "trace", "in": "header", "required": False, "schema": {"type": "string"}},
            {"name": "pet", "in": "body", "required": True, "schema": {"$ref": "#/components/schemas/Pet"}},
        ],
        responses={"201": {"description": "Created", "schema": {"$ref": "#/components/schemas/Pet"}}, "400": {"description": "Bad"}},
        deprecated=True,
        extension_data={"internal": True},
    ))
    return document


class TestSwagger2:
    def test_media_types_native(self):
        data = to_dict(_document("swagger2"))
        assert data["swagger"] == "2.0"
        assert data["consumes"] == ["application/json"]
        operation = data["paths"]["/pets"]["post"]
        assert operation["consumes"] == ["application/json", "application/xml"]
        assert "produces" not in operation
        assert operation["deprecated"] is True
        assert operation["x-internal"] is True
        assert data["definitions"] == {"Pet": {"type": "object"}}
        assert data["x-generator"] == "gen"


class TestOpenApi3:
    def test_request_body_and_content(self):
        data = to_dict(_document())
        assert data["openapi"] == "3.0.3"
        assert "consumes" not in data
        assert data["components"]["schemas"] == {"Pet": {"type": "object"}}

        operation = data["paths"]["/pets"]["post"]
        assert operation["parameters"] == [{"name": "trace", "in": "header", "required": False, "schema": {"type": "string"}}]
        body = operation["requestBody"]
        assert body["required"] is True
        assert list(body["content"]) == ["application/json", "application/xml"]
        created = operation["responses"]["201"]
        assert created["description"] == "Created"
        assert list(created["content"]) == ["application/json"]
        assert operation["responses"]["400"] == {"description": "Bad"}

    def test_security_components(self):
        document = Document(security_definitions={"key": {"type": "apiKey"}}, security=[{"key": []}])
        data = to_dict(document)
        assert data["components"]["securitySchemes"] == {"key": {"type": "apiKey"}}
        assert data["security"] == [{"key": []}]


class TestDump:
    def test_json(self):
        assert json.loads(dump(_document(), "json"))["info"]["title"] == "Pets"

    def test_yaml_keeps_key_order(self):
        text = dump(_document(), "yaml")
        assert text.startswith("openapi:")
        assert yaml.safe_load(text)["paths"]["/pets"]["post"]["operationId"] == "Pets_Create"


class TestTemplates:
    def test_load_openapi3_template(self):
        document = load_template(
            "openapi: 3.0.3\n"
            "info: {title: T, version: 2}\n"
            "components: {schemas: {A: {type: string}}}\n"
            "x-audience: public\n"
            "paths:\n"
            "  /health:\n"
            "    get: {operationId: health, responses: {'200': {description: OK}}}\n"
        )
        assert document.schema_type == "openapi3"
        assert document.info.version == "2"
        assert document.definitions == {"A": {"type": "string"}}
        assert document.extension_data == {"x-audience": "public"}
        operation = document.paths["/health"].operations["get"]
        assert operation.operation_id == "health"
        assert operation.consumes.is_inherited

    def test_swagger2_template(self):
        document = from_dict({"swagger": "2.0", "produces": ["application/json"], "securityDefinitions": {"k": {}}})
        assert document.schema_type == "swagger2"
        assert document.produces == ["application/json"]
        assert document.security_definitions == {"k": {}}
