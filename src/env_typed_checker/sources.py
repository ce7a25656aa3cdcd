"""Loading schema files and assembling raw environment mappings."""

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from dotenv import dotenv_values

from env_typed_checker.errors import SchemaError
from env_typed_checker.schema.normalize import normalize_spec

logger = logging.getLogger(__name__)

DEFAULT_ENV_FILE = ".env"


def load_schema(file_path: Path) -> dict:
    """Read a JSON or YAML schema file and check every declaration.

    Format is picked by suffix; unknown suffixes are tried as JSON first,
    then YAML.
    """
    file_path = Path(file_path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise SchemaError(f"Cannot read schema file {file_path}: {e.strerror}") from e

    suffix = file_path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _parse_yaml(text, file_path)
    elif suffix == ".json":
        data = _parse_json(text, file_path)
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            data = _parse_yaml(text, file_path)

    if not isinstance(data, dict):
        raise SchemaError("Schema must be a JSON object of key -> spec.")

    bad_keys = [k for k in data if not isinstance(k, str)]
    if bad_keys:
        raise SchemaError(f"Schema keys must be strings, got {bad_keys!r}")

    # Validate with the same normalizer the runner uses
    for key, declaration in data.items():
        try:
            normalize_spec(declaration)
        except SchemaError as e:
            raise SchemaError(f'Invalid schema value for "{key}": {e}') from e

    logger.debug("loaded %d schema keys from %s", len(data), file_path)
    return data


def _parse_json(text: str, file_path: Path):
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaError(f"{file_path} is not valid JSON: {e}") from e


def _parse_yaml(text: str, file_path: Path):
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SchemaError(f"{file_path} is not valid YAML: {e}") from e


def read_env_file(file_path: Path) -> dict[str, str]:
    """Parse an env file, returning {} when it does not exist.

    ``export KEY=value`` lines are accepted. Lines without ``=`` are ignored.
    """
    file_path = Path(file_path)
    if not file_path.exists():
        return {}
    parsed = dotenv_values(file_path)
    return {k: v for k, v in parsed.items() if v is not None}


def build_env(
    use_dotenv: bool = True,
    env_file: Path | None = None,
    base: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Merge the process environment with an env file.

    Values from the env file override the shell environment. A missing env
    file is skipped.
    """
    env = dict(os.environ if base is None else base)
    if not use_dotenv:
        return env

    path = Path(env_file) if env_file else Path.cwd() / DEFAULT_ENV_FILE
    if not path.exists():
        if env_file:
            logger.warning("env file %s not found, using process environment only", path)
        return env

    parsed = read_env_file(path)
    logger.debug("read %d variables from %s", len(parsed), path)
    env.update(parsed)
    return env
