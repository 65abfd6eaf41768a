"""Version value type."""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field


class VersionString(BaseModel):
    """A parsed version: numeric components plus an optional qualifier.

    Build instances with ``cuda_doctor.core.version.parse``; ordering lives
    there as well.
    """

    model_config = {"frozen": True}

    components: tuple[int, ...] = Field(description="Numeric components, most significant first")
    qualifier: str = Field(default="", description="Trailing non-numeric text, kept verbatim")
    text: str = Field(default="", description="Normalized source text")

    def __str__(self) -> str:
        if self.text:
            return self.text
        return ".".join(str(c) for c in self.components) + self.qualifier

    def truncate(self, length: int) -> "VersionString":
        """Keep only the first ``length`` components, dropping the qualifier."""
        components = self.components[:length]
        return VersionString(
            components=components,
            text=".".join(str(c) for c in components),
        )


def _parse_text(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if isinstance(value, str):
        from cuda_doctor.core.version import parse

        return parse(value)
    return value


# Version field that also accepts version text, e.g. in static rule data.
VersionField = Annotated[VersionString, BeforeValidator(_parse_text)]
