"""Type coercion for the six base types.

``parse_by_type`` is used both for live environment values and, through
``coerce_default``, for defaults declared in a schema, so a default is
always held to the same rules as a real value.
"""

import json
import math
import re
from typing import Any

from pydantic import AnyUrl, TypeAdapter, ValidationError

from env_typed_checker.errors import ValueParseError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

TRUE_TOKENS = ("true", "1", "yes", "y", "on")
FALSE_TOKENS = ("false", "0", "no", "n", "off")

_DECIMAL_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$", re.ASCII)
_INTEGER_RE = re.compile(r"^[+-]?\d+$", re.ASCII)
_PREFIXED_RE = re.compile(r"^0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)$")

_url_adapter = TypeAdapter(AnyUrl)


def parse_by_type(kind: str, raw: str) -> Any:
    """Coerce a raw string into the Python value for ``kind``.

    Raises ValueParseError with a message suitable for an issue report.
    """
    if kind == "string":
        return raw

    if kind == "number":
        return _parse_number(raw)

    if kind == "boolean":
        v = raw.strip().lower()
        if v in TRUE_TOKENS:
            return True
        if v in FALSE_TOKENS:
            return False
        raise ValueParseError(f'expected boolean (true/false/1/0/yes/no/on/off), got "{raw}"')

    if kind == "json":
        try:
            return json.loads(raw, parse_constant=_reject_constant)
        except ValueError:
            raise ValueParseError(f'expected json, got "{raw}"') from None

    if kind == "url":
        try:
            _url_adapter.validate_python(raw)
        except ValidationError:
            raise ValueParseError(f'expected url, got "{raw}"') from None
        return raw

    if kind == "email":
        s = raw.strip()
        if not EMAIL_RE.match(s):
            raise ValueParseError(f'expected email, got "{raw}"')
        return s

    raise ValueParseError(f"unsupported primitive type: {kind}")


def coerce_default(kind: str, value: Any) -> Any:
    """Type-check a declared default and convert it to the runtime type.

    - number/boolean defaults may be given as strings (parsed)
    - url/email defaults must be strings that pass validation
    - json defaults are taken as-is
    """
    if kind == "string":
        if not isinstance(value, str):
            raise ValueParseError("default for string must be a string")
        return value

    if kind == "number":
        # bool is an int subclass but never a number default
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if not _is_finite(value):
                raise ValueParseError("default for number must be finite")
            return value
        if isinstance(value, str):
            return parse_by_type("number", value)
        raise ValueParseError("default for number must be number or string")

    if kind == "boolean":
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return parse_by_type("boolean", value)
        raise ValueParseError("default for boolean must be boolean or string")

    if kind == "json":
        return value

    if kind in ("url", "email"):
        if not isinstance(value, str):
            raise ValueParseError(f"default for {kind} must be a string")
        return parse_by_type(kind, value)

    raise ValueParseError(f"unsupported default kind: {kind}")


def _parse_number(raw: str) -> int | float:
    s = raw.strip()
    try:
        if _INTEGER_RE.match(s) or _PREFIXED_RE.match(s):
            n = int(s, 0) if _PREFIXED_RE.match(s) else int(s)
            if _is_finite(n):
                return n
        if _DECIMAL_RE.match(s):
            n = float(s)
            if math.isfinite(n):
                return n
    except (ValueError, OverflowError):
        pass
    raise ValueParseError(f'expected number, got "{raw}"')


def _is_finite(n: int | float) -> bool:
    # ints beyond the double range count as infinite
    try:
        return math.isfinite(n)
    except OverflowError:
        return False


def _reject_constant(name: str):
    raise ValueError(f"invalid JSON constant {name}")
