"""Validate and parse environment variables against a declarative schema."""

from env_typed_checker.envdoctor import env_doctor
from env_typed_checker.errors import EnvCheckerError, EnvValidationError, SchemaError, ValueParseError
from env_typed_checker.schema.base import EnumSpec, Issue, NormalizedSpec, PrimitiveSpec, RegexSpec, RunResult
from env_typed_checker.schema.normalize import normalize_spec
from env_typed_checker.validator.runner import run, validate_and_parse

__all__ = [
    "EnumSpec",
    "EnvCheckerError",
    "EnvValidationError",
    "Issue",
    "NormalizedSpec",
    "PrimitiveSpec",
    "RegexSpec",
    "RunResult",
    "SchemaError",
    "ValueParseError",
    "env_doctor",
    "normalize_spec",
    "run",
    "validate_and_parse",
]
