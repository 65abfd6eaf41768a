"""JSON renderer for cuda-doctor output."""

from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from cuda_doctor.knowledge.remediation import get_remediation
from cuda_doctor.renderers.base import BaseRenderer, OutputFormat, RenderContext


class JSONRenderer(BaseRenderer):
    """Renderer for JSON output format.

    Reports are dumped through their pydantic models, so field names match
    the persisted snapshot format. Diagnostic reports also carry the
    remediation hints for every missing component.

    Example:
        renderer = JSONRenderer()
        json_str = renderer.render(report, context)
    """

    @property
    def format(self) -> OutputFormat:
        """The output format this renderer produces."""
        return OutputFormat.JSON

    def render(self, data: Any, context: RenderContext) -> str:
        """Render data to a JSON string.

        Args:
            data: The data to render (typically a Pydantic model)
            context: Rendering context with options

        Returns:
            JSON string
        """
        if isinstance(data, BaseModel):
            dict_data = data.model_dump(mode="json")
        else:
            dict_data = data

        if data.__class__.__name__ == "DiagnosticReport":
            dict_data["remediation"] = _remediation(data.missing, context.platform)

        return json.dumps(
            dict_data,
            indent=context.indent if context.indent else None,
            default=self._json_serializer,
            ensure_ascii=False,
        )

    @staticmethod
    def _json_serializer(obj: Any) -> Any:
        """Custom JSON serializer for non-standard types."""
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, Path):
            return str(obj)
        if isinstance(obj, (set, tuple)):
            return list(obj)
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json")
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _remediation(keys: list[str], platform_tag: str) -> dict[str, Any]:
    hints = {}
    for key in keys:
        hint = get_remediation(key, platform_tag)
        if hint is not None:
            hints[key] = hint
    return hints
