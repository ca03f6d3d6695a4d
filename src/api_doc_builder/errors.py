"""Exceptions raised while building an API description document."""


class DocumentGenerationError(Exception):
    """Base class for errors that abort a generation run."""


class ConfigurationConflictError(DocumentGenerationError):
    """Two endpoints were mapped to the same HTTP method and path."""

    def __init__(self, method: str, path: str):
        self.method = method
        self.path = path
        super().__init__(f"The method '{method}' on path '{path}' is registered multiple times.")


class ManifestError(DocumentGenerationError):
    """An endpoint manifest could not be read or is malformed."""


class SettingsError(DocumentGenerationError):
    """A settings file could not be read or names an unknown processor."""
