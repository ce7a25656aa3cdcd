"""Normalized schema models.

Every accepted declaration (shorthand string, enum spec, regex spec,
primitive object spec) is converted into one of these models by
``normalize_spec`` so the runner never inspects raw declarations.
"""

import re
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

BASE_TYPES = ("string", "number", "boolean", "json", "url", "email")

BaseType = Literal["string", "number", "boolean", "json", "url", "email"]

# Declaration value meaning "no default", for code that builds schemas
# programmatically and needs to switch a default off explicitly.
NO_DEFAULT = object()


class _SpecBase(BaseModel):
    """Fields shared by every normalized spec."""

    model_config = ConfigDict(frozen=True)

    optional: bool = False
    has_default: bool = False
    default_value: Any = None  # already coerced/validated when has_default
    description: str | None = None
    example: str | None = None
    secret: bool = False


class PrimitiveSpec(_SpecBase):
    """One of the six base types."""

    kind: BaseType


class EnumSpec(_SpecBase):
    """Exact, case-sensitive membership in a fixed list of strings."""

    kind: Literal["enum"] = "enum"
    values: tuple[str, ...]


class RegexSpec(_SpecBase):
    """A compiled pattern that raw values must match."""

    kind: Literal["regex"] = "regex"
    pattern: re.Pattern
    source: str
    flags: str = ""

    @property
    def display(self) -> str:
        return f"/{self.source}/{self.flags}"

    def matches(self, value: str) -> bool:
        if "y" in self.flags:
            return self.pattern.match(value) is not None
        return self.pattern.search(value) is not None


NormalizedSpec = Union[PrimitiveSpec, EnumSpec, RegexSpec]


class Issue(BaseModel):
    """A single problem found for one key."""

    key: str
    kind: Literal["missing", "invalid"]
    message: str


class RunResult(BaseModel):
    """Outcome of validating a whole schema.

    ``values`` is only set when no issue was found; a failed run never
    exposes the keys that did resolve.
    """

    values: dict[str, Any] | None = None
    issues: list[Issue] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues
