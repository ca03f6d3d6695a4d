"""Generator settings and their YAML loader."""

import importlib
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from api_doc_builder.document.models import Document, SchemaType
from api_doc_builder.errors import SettingsError
from api_doc_builder.processors.operation import (
    OperationParameterProcessor,
    OperationResponseProcessor,
    OperationTagsProcessor,
)

logger = logging.getLogger(__name__)


def default_operation_processors() -> list:
    return [OperationParameterProcessor(), OperationResponseProcessor(), OperationTagsProcessor()]


class GeneratorSettings(BaseModel):
    """Configuration of one document generator."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    title: str = ""
    description: str = ""
    version: str = "1.0.0"
    schema_type: SchemaType = "openapi3"
    document_template: str | Document | None = None  # document, or JSON/YAML text
    api_group_names: list[str] = []  # empty: all groups
    operation_processors: list[Any] = Field(default_factory=default_operation_processors)
    document_processors: list[Any] = []
    post_process: Callable[[Document], None] | None = None


def load_settings(file_path: Path) -> GeneratorSettings:
    """Load settings from a YAML file.

    Processors are listed as ``{"class": "package.module.Name", "args": {...}}``
    (or just the dotted path) and are appended to the default operation
    processors unless ``default_operation_processors: false`` is set.
    """
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise SettingsError(f"Cannot read settings {file_path}: {e}") from e
    if not isinstance(data, dict):
        raise SettingsError(f"Settings {file_path} must be a mapping")

    use_defaults = data.pop("default_operation_processors", True)
    operation_specs = data.pop("operation_processors", []) or []
    document_specs = data.pop("document_processors", []) or []

    template_file = data.pop("document_template_file", None)
    if template_file:
        template_path = file_path.parent / template_file
        try:
            data["document_template"] = template_path.read_text(encoding="utf-8")
        except OSError as e:
            raise SettingsError(f"Cannot read document template {template_path}: {e}") from e

    operation_processors = default_operation_processors() if use_defaults else []
    operation_processors.extend(build_processor(spec) for spec in operation_specs)

    try:
        settings = GeneratorSettings(
            **data,
            operation_processors=operation_processors,
            document_processors=[build_processor(spec) for spec in document_specs],
        )
    except ValidationError as e:
        raise SettingsError(f"Invalid settings {file_path}: {e}") from e

    logger.info(
        "Loaded settings from %s (%d operation processors, %d document processors)",
        file_path,
        len(settings.operation_processors),
        len(settings.document_processors),
    )
    return settings


def build_processor(spec: str | dict) -> Any:
    """Instantiate a processor from its dotted class path and keyword arguments."""
    if isinstance(spec, str):
        spec = {"class": spec}
    dotted = spec.get("class") if isinstance(spec, dict) else None
    if not dotted or "." not in dotted:
        raise SettingsError(f"Invalid processor entry: {spec!r}")

    module_name, _, class_name = dotted.rpartition(".")
    try:
        cls = getattr(importlib.import_module(module_name), class_name)
        return cls(**(spec.get("args") or {}))
    except (ImportError, AttributeError, TypeError, ValueError) as e:
        raise SettingsError(f"Cannot create processor {dotted}: {e}") from e
