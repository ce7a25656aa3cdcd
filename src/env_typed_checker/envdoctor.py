"""Application bootstrap entry point."""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import load_dotenv as _load_dotenv

from env_typed_checker.validator.runner import validate_and_parse


def env_doctor(
    schema: Mapping[str, Any],
    env: Mapping[str, str | None] | None = None,
    load_dotenv: bool = True,
    dotenv_path: Path | None = None,
) -> dict[str, Any]:
    """Validate the environment against ``schema`` and return typed values.

    When ``load_dotenv`` is true the ``.env`` file (or ``dotenv_path``) is
    loaded into ``os.environ`` first without overriding existing variables.
    Raises EnvValidationError listing every problem.
    """
    if load_dotenv:
        _load_dotenv(dotenv_path)
    if env is None:
        env = os.environ
    return validate_and_parse(schema, env)
