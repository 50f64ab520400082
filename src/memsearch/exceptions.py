"""Errors raised by the search engine.

Every error is raised synchronously at the point of detection. Nothing is
partially applied before an error is raised: documents are validated before
the store or index is touched, and search parameters are fully validated
before any field weight is written.
"""


class SearchEngineError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(SearchEngineError):
    """Raised when the engine configuration or schema is malformed."""


class ValidationError(SearchEngineError):
    """Raised when a document does not match the schema."""


class ParameterError(SearchEngineError):
    """Raised when search parameters are malformed or reference unknown fields."""


class TypeMismatchError(ParameterError):
    """Raised when a condition operand does not match the field's declared type."""
