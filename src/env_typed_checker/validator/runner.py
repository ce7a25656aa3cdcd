"""Validation runner.

Resolves every key of a schema against a flat mapping of raw values and
collects all issues in schema order instead of stopping at the first one.
"""

import logging
from collections.abc import Mapping
from typing import Any

from env_typed_checker.errors import EnvValidationError, SchemaError, ValueParseError
from env_typed_checker.schema.base import Issue, NormalizedSpec, RunResult
from env_typed_checker.schema.normalize import normalize_spec
from env_typed_checker.schema.primitives import parse_by_type

logger = logging.getLogger(__name__)

MISSING_MESSAGE = "missing required environment variable"


def run(schema: Mapping[str, Any], env: Mapping[str, str | None]) -> RunResult:
    """Validate ``env`` against ``schema`` and return every issue found.

    Per-key failures (bad declaration, missing or unparseable value) never
    raise; they are reported through ``RunResult.issues``. Only a schema
    that is not a mapping with string keys raises SchemaError.
    """
    if not isinstance(schema, Mapping):
        raise SchemaError("Schema must be a mapping of key -> spec.")
    bad_keys = [k for k in schema if not isinstance(k, str)]
    if bad_keys:
        raise SchemaError(f"Schema keys must be strings, got {bad_keys!r}")

    issues: list[Issue] = []
    out: dict[str, Any] = {}

    for key, declaration in schema.items():
        try:
            spec = normalize_spec(declaration)
        except SchemaError as e:
            issues.append(Issue(key=key, kind="invalid", message=str(e)))
            continue

        raw = env.get(key)

        # unset and blank are the same thing
        if raw is None or raw == "":
            if spec.has_default:
                out[key] = spec.default_value
            elif spec.optional:
                out[key] = None
            else:
                issues.append(Issue(key=key, kind="missing", message=MISSING_MESSAGE))
            continue

        try:
            out[key] = resolve_value(spec, raw)
        except ValueParseError as e:
            issues.append(Issue(key=key, kind="invalid", message=str(e)))

    if issues:
        logger.debug("validation found %d issue(s) across %d key(s)", len(issues), len(schema))
        return RunResult(issues=issues)
    return RunResult(values=out)


def resolve_value(spec: NormalizedSpec, raw: str) -> Any:
    """Check a present raw value against its normalized spec."""
    if spec.kind == "enum":
        if raw not in spec.values:
            raise ValueParseError(f'expected one of [{", ".join(spec.values)}], got "{raw}"')
        return raw

    if spec.kind == "regex":
        if not spec.matches(raw):
            raise ValueParseError(f"does not match {spec.display}")
        return raw

    return parse_by_type(spec.kind, raw)


def validate_and_parse(schema: Mapping[str, Any], env: Mapping[str, str | None]) -> dict[str, Any]:
    """Like ``run`` but raise EnvValidationError on failure."""
    result = run(schema, env)
    if not result.ok:
        raise EnvValidationError(result.issues)
    return result.values
