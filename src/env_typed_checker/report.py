"""Formatting validation results for humans, machines and CI."""

import json
from collections.abc import Mapping
from typing import Any

from env_typed_checker.errors import VALIDATION_HEADER, SchemaError
from env_typed_checker.generator.envfile import default_to_env_string, type_label
from env_typed_checker.schema.base import Issue
from env_typed_checker.schema.normalize import normalize_spec

REDACTED = "***"

FORMATS = ("text", "json", "github")


def secret_keys(schema: Mapping[str, Any]) -> set[str]:
    """Keys whose declaration is marked ``secret``."""
    keys = set()
    for key, declaration in schema.items():
        try:
            if normalize_spec(declaration).secret:
                keys.add(key)
        except SchemaError:
            continue  # reported as an issue by the runner
    return keys


def redact_issues(issues: list[Issue], schema: Mapping[str, Any], env: Mapping[str, str | None]) -> list[Issue]:
    """Replace raw values of secret keys inside issue messages."""
    secrets = secret_keys(schema)
    redacted = []
    for issue in issues:
        raw = env.get(issue.key)
        if issue.key in secrets and raw:
            issue = issue.model_copy(update={"message": issue.message.replace(raw, REDACTED)})
        redacted.append(issue)
    return redacted


def format_issues(issues: list[Issue], fmt: str = "text") -> str:
    if fmt == "json":
        return json.dumps({"ok": not issues, "issues": [i.model_dump() for i in issues]}, indent=2)
    if fmt == "github":
        return "\n".join(f"::error title={_gh_property(i.key)}::{_gh_data(i.message)}" for i in issues)
    return "\n".join([VALIDATION_HEADER, *(f"- {i.key}: {i.message}" for i in issues)])


def _gh_data(text: str) -> str:
    return text.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _gh_property(text: str) -> str:
    return _gh_data(text).replace(":", "%3A").replace(",", "%2C")


def render_docs(schema: Mapping[str, Any]) -> str:
    """Markdown table describing every key of a (pre-validated) schema."""
    rows = [
        "| Key | Type | Required | Default | Description | Example |",
        "| --- | --- | --- | --- | --- | --- |",
    ]
    for key, declaration in schema.items():
        spec = normalize_spec(declaration)
        kind = type_label(declaration).rstrip("?")
        if spec.kind == "enum":
            kind = f"enum ({' / '.join(spec.values)})"
        elif spec.kind == "regex":
            kind = f"regex `{spec.display}`"

        default = ""
        if spec.has_default:
            text = "null" if spec.default_value is None else default_to_env_string(spec.default_value)
            default = REDACTED if spec.secret else f"`{text}`"

        required = "no" if spec.optional or spec.has_default else "yes"
        cells = [f"`{key}`", kind, required, default, spec.description or "", spec.example or ""]
        rows.append("| " + " | ".join(c.replace("|", "\\|") for c in cells) + " |")
    return "\n".join(rows) + "\n"
