"""Marker table for probe output.

Every string the extractors look for in tool output lives here, so that a
vendor changing its output format is a data change rather than a code change.
Markers, anchors and boundaries are regular expressions.
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, Field


class TextPattern(BaseModel):
    """How to find a component, and its version, in one probe's output.

    Three layouts are supported:

    * free text: ``marker`` locates the component, then the first
      version-looking token after ``version_after`` (or after the marker)
      is the version;
    * CSV records: one record per line, fields named by ``columns``
      (``name``, ``index`` and ``version`` are special, the rest become
      details);
    * composite defines: the version is assembled from several
      ``#define NAME <int>`` lines, in order.

    When ``device_boundary`` is set the text is first cut into one segment
    per device and each segment is matched on its own.
    """

    model_config = {"frozen": True}

    marker: str | None = Field(default=None, description="Regex that must be present")
    ignore_case: bool = Field(default=False, description="Match the marker case-insensitively")
    version_after: str | None = Field(default=None, description="Regex anchor the version follows")
    scan_version: bool = Field(default=True, description="Whether the text carries a version at all")
    require_version: bool = Field(default=True, description="Reject matches without a version")
    device_boundary: str | None = Field(default=None, description="Regex starting each device segment")
    columns: tuple[str, ...] | None = Field(default=None, description="CSV field names")
    separator: str = Field(default=",", description="CSV field separator")
    name_after: str | None = Field(default=None, description="Literal text the device name follows")
    name_until: str | None = Field(default=None, description="Literal text ending the device name")
    defines: tuple[str, ...] | None = Field(default=None, description="#define names forming the version")
    encoding: Literal["dotted", "cudnn_int"] = Field(default="dotted", description="Version encoding")


# Tokens that mean "the tool ran but has nothing to report".
EMPTY_VALUES = frozenset({"", "None", "none", "N/A", "[N/A]", "[Not Supported]"})

# Python probes print a leading tag so the answer can be told apart from
# interpreter noise such as deprecation warnings.
PYTHON_TAG = "cuda-doctor:"


# GPU

NVIDIA_SMI_GPU_QUERY = TextPattern(
    columns=("index", "name", "version", "memory_mb"),
    require_version=False,
)

NVIDIA_SMI_GPU_LIST = TextPattern(
    marker=r"^GPU \d+:",
    device_boundary=r"(?m)^GPU \d+:",
    scan_version=False,
    require_version=False,
    name_after=": ",
    name_until=" (UUID",
)

LSPCI_GPU = TextPattern(
    marker=r"(VGA compatible controller|3D controller|Display controller): NVIDIA",
    ignore_case=True,
    device_boundary=r"(?m)^(?=\S)",
    scan_version=False,
    require_version=False,
    name_after="controller: ",
    name_until=" (rev",
)

WMIC_GPU = TextPattern(
    marker=r"NVIDIA",
    ignore_case=True,
    device_boundary=r"(?m)^(?=\S)",
    scan_version=False,
    require_version=False,
    name_after="",
)

SYSTEM_PROFILER_GPU = TextPattern(
    marker=r"Chipset Model:.*NVIDIA",
    ignore_case=True,
    device_boundary=r"Chipset Model:",
    scan_version=False,
    require_version=False,
    name_after="Chipset Model:",
)


# Driver

NVIDIA_SMI_DRIVER_QUERY = TextPattern(columns=("version",))

NVIDIA_SMI_DRIVER_BANNER = TextPattern(marker=r"Driver Version")

PROC_DRIVER_VERSION = TextPattern(marker=r"NVRM version", version_after=r"Kernel Module")


# CUDA toolkit

NVCC_VERSION = TextPattern(marker=r"Cuda compilation tools", version_after=r"release")

CUDA_VERSION_TXT = TextPattern(marker=r"CUDA Version")

CUDA_VERSION_JSON = TextPattern(marker=r'"cuda"', version_after=r'"version"')


# cuDNN

CUDNN_HEADER = TextPattern(
    marker=r"#define\s+CUDNN_MAJOR",
    defines=("CUDNN_MAJOR", "CUDNN_MINOR", "CUDNN_PATCHLEVEL"),
)


# Python-side probes: ``print(PYTHON_TAG, '<label>', value)``


def python_value(label: str, encoding: Literal["dotted", "cudnn_int"] = "dotted") -> TextPattern:
    """Pattern for a value printed by a tagged ``python -c`` probe."""
    return TextPattern(marker=rf"{PYTHON_TAG} {re.escape(label)}(?=\s)", encoding=encoding)


PIP_SHOW = TextPattern(marker=r"^Name:", version_after=r"^Version:")


def conda_list(package: str) -> TextPattern:
    """Pattern for the package line of ``conda list <package>``."""
    return TextPattern(marker=rf"^{re.escape(package)}\s")
