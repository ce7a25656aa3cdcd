"""Exception types for env-typed-checker."""

from env_typed_checker.schema.base import Issue

VALIDATION_HEADER = "ENV validation failed"


class EnvCheckerError(Exception):
    """Base class for every error raised by this package."""


class SchemaError(EnvCheckerError):
    """A declaration, or the schema container itself, is malformed."""


class ValueParseError(EnvCheckerError, ValueError):
    """A raw value or a declared default failed type coercion."""


class GenerateError(EnvCheckerError):
    """An env file could not be generated."""


class EnvValidationError(EnvCheckerError):
    """Aggregated failure carrying every issue found in one pass."""

    def __init__(self, issues: list[Issue]):
        self.issues = list(issues)
        lines = [f"- {i.key}: {i.message}" for i in self.issues]
        super().__init__("\n".join([VALIDATION_HEADER, *lines]))
