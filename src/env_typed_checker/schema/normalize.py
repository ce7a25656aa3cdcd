"""Schema declaration normalizer.

Converts any accepted declaration for a single key into a
``NormalizedSpec``. Declared defaults are coerced and validated here, so
the runner can use ``default_value`` without checking it again.
"""

import re
from collections.abc import Mapping
from typing import Any

from env_typed_checker.errors import SchemaError, ValueParseError
from env_typed_checker.schema.base import BASE_TYPES, NO_DEFAULT, EnumSpec, NormalizedSpec, PrimitiveSpec, RegexSpec
from env_typed_checker.schema.primitives import coerce_default

REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    # no meaning for a single test against a fresh pattern
    "g": 0,
    "u": 0,
    "v": 0,
    "d": 0,
    # sticky: match must start at index 0, see RegexSpec.matches
    "y": 0,
}

_SUPPORTED = ", ".join(BASE_TYPES)


def normalize_spec(declaration: Any) -> NormalizedSpec:
    """Normalize one schema declaration.

    Accepts ``"number"``/``"number?"`` shorthands and ``{"type": ...}``
    object specs for primitives, enums and regexes. Raises SchemaError
    when the declaration has no recognized shape or a default is invalid.
    """
    if isinstance(declaration, str):
        optional = declaration.endswith("?")
        base = declaration[:-1] if optional else declaration
        if base not in BASE_TYPES:
            raise SchemaError(
                f'Unsupported type "{declaration}". Supported: {_SUPPORTED} (optional with ?)'
            )
        return PrimitiveSpec(kind=base, optional=optional)

    if not isinstance(declaration, Mapping):
        raise SchemaError("Schema value must be a string or object spec.")

    spec_type = declaration.get("type")
    if spec_type not in BASE_TYPES and spec_type not in ("enum", "regex"):
        raise SchemaError(
            f'Unsupported object spec type "{spec_type}". '
            f"Supported: primitives ({'/'.join(BASE_TYPES)}), enum, regex"
        )

    common = _common_fields(declaration)
    if spec_type == "enum":
        return _enum(declaration, common)
    if spec_type == "regex":
        return _regex(declaration, common)
    return _primitive(spec_type, declaration, common)


def _common_fields(declaration: Mapping) -> dict:
    fields = {"optional": bool(declaration.get("optional", False)), "secret": False}

    for name in ("description", "example"):
        value = declaration.get(name)
        if value is None:
            continue
        if not isinstance(value, str):
            raise SchemaError(f'"{name}" must be a string if provided')
        fields[name] = value

    secret = declaration.get("secret")
    if secret is not None:
        if not isinstance(secret, bool):
            raise SchemaError('"secret" must be a boolean if provided')
        fields["secret"] = secret

    return fields


def _declared_default(declaration: Mapping) -> tuple[bool, Any]:
    # presence decides; None is a real (usually invalid) default
    if "default" not in declaration or declaration["default"] is NO_DEFAULT:
        return False, None
    return True, declaration["default"]


def _primitive(kind: str, declaration: Mapping, common: dict) -> PrimitiveSpec:
    has_default, default = _declared_default(declaration)
    if has_default:
        try:
            default = coerce_default(kind, default)
        except ValueParseError as e:
            raise SchemaError(str(e)) from e
    return PrimitiveSpec(kind=kind, has_default=has_default, default_value=default, **common)


def _enum(declaration: Mapping, common: dict) -> EnumSpec:
    values = declaration.get("values")
    if not isinstance(values, (list, tuple)) or not values or not all(isinstance(v, str) for v in values):
        raise SchemaError('enum spec requires "values": string[] (non-empty)')
    if len(set(values)) != len(values):
        raise SchemaError('enum spec "values" must not contain duplicates')

    has_default, default = _declared_default(declaration)
    if has_default:
        if not isinstance(default, str):
            raise SchemaError("default for enum must be a string")
        if default not in values:
            raise SchemaError(f'default "{default}" must be one of [{", ".join(values)}]')

    return EnumSpec(values=tuple(values), has_default=has_default, default_value=default, **common)


def _regex(declaration: Mapping, common: dict) -> RegexSpec:
    source = declaration.get("pattern")
    flags = declaration.get("flags")

    if not isinstance(source, str) or not source:
        raise SchemaError('regex spec requires "pattern": string')
    if flags is not None and not isinstance(flags, str):
        raise SchemaError('regex spec "flags" must be a string if provided')
    flags = flags or ""

    try:
        pattern = re.compile(source, _compile_flags(flags))
    except re.error as e:
        raise SchemaError(f"invalid regex: {e}") from e

    spec = RegexSpec(pattern=pattern, source=source, flags=flags, **common)

    has_default, default = _declared_default(declaration)
    if has_default:
        if not isinstance(default, str):
            raise SchemaError("default for regex must be a string")
        if not spec.matches(default):
            raise SchemaError(f'default "{default}" does not match {spec.display}')
        spec = spec.model_copy(update={"has_default": True, "default_value": default})

    return spec


def _compile_flags(flags: str) -> int:
    result = 0
    for letter in flags:
        if letter not in REGEX_FLAGS:
            raise re.error(f"unsupported flag {letter!r} in {flags!r}")
        if flags.count(letter) > 1:
            raise re.error(f"duplicate flag {letter!r} in {flags!r}")
        result |= REGEX_FLAGS[letter]
    if "u" in flags and "v" in flags:
        raise re.error(f"flags u and v are mutually exclusive in {flags!r}")
    return result
