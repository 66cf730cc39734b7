"""Pipeline exception types."""


class IngestionError(Exception):
    """Base class for adapter-level failures."""


class SourceFetchError(IngestionError):
    """An upstream endpoint answered with something we cannot use."""


class SourceConfigurationError(IngestionError):
    """A source cannot run with the current settings (e.g. missing API key)."""


class AlertValidationError(ValueError):
    """A normalized alert is missing required fields."""

    def __init__(self, message: str, fields: list[str] | None = None):
        super().__init__(message)
        self.fields = fields or []
