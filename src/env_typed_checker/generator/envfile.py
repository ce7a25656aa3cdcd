"""Env file generator — writes placeholder lines for schema keys."""

import json
import re
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel

from env_typed_checker.errors import GenerateError
from env_typed_checker.schema.normalize import normalize_spec
from env_typed_checker.sources import read_env_file

_NEEDS_QUOTING_RE = re.compile(r"[\s#\"']")


class GenerateResult(BaseModel):
    """What a generate run did to the output file."""

    path: Path
    mode: Literal["update", "create"]
    added: list[str]


class EnvFileGenerator:
    """Renders ``KEY=value`` lines for keys missing from an env file."""

    def __init__(self, use_defaults: bool = True, comment_types: bool = False):
        self.use_defaults = use_defaults
        self.comment_types = comment_types

    def generate(self, schema: dict[str, Any], existing: dict[str, str] | None = None) -> dict[str, str]:
        """Return {key: line} for every schema key not in ``existing``, sorted by key.

        Existing keys are never overwritten, even when their value is empty.
        """
        existing = existing or {}
        lines = {}
        for key in sorted(schema):
            if key in existing:
                continue
            declaration = schema[key]
            value = ""
            if self.use_defaults:
                spec = normalize_spec(declaration)
                if spec.has_default:
                    value = default_to_env_string(spec.default_value)
            comment = type_label(declaration) if self.comment_types else None
            lines[key] = format_env_line(key, value, comment)
        return lines

    def write(self, schema: dict[str, Any], out_path: Path, mode: str = "update") -> GenerateResult:
        """Create or append to ``out_path``.

        ``create`` refuses to touch an existing file; ``update`` appends only
        the missing keys.
        """
        out_path = Path(out_path)
        if mode == "create" and out_path.exists():
            raise GenerateError(f"Refusing to overwrite existing file: {out_path}")

        existing = read_env_file(out_path) if mode == "update" else {}
        lines = self.generate(schema, existing)
        result = GenerateResult(path=out_path, mode=mode, added=list(lines))
        if not lines:
            return result

        body = "\n".join(lines.values()) + "\n"
        out_path.parent.mkdir(parents=True, exist_ok=True)
        if mode == "create" or not out_path.exists():
            out_path.write_text(body, encoding="utf-8")
        else:
            with out_path.open("a", encoding="utf-8") as f:
                f.write("\n" + body)
        return result


def type_label(declaration: Any) -> str:
    """Shorthand string as written, or the ``type`` of an object spec."""
    if isinstance(declaration, str):
        return declaration
    return str(declaration.get("type"))


def default_to_env_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    if isinstance(value, (int, float)):
        return repr(value)
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def needs_quoting(value: str) -> bool:
    return value == "" or bool(_NEEDS_QUOTING_RE.search(value))


def format_env_line(key: str, value: str, comment: str | None = None) -> str:
    safe = json.dumps(value, ensure_ascii=False) if needs_quoting(value) else value
    return f"{key}={safe} # {comment}" if comment else f"{key}={safe}"
