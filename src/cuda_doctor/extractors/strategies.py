"""Per-platform probe lists.

A strategy answers one question: for a capability tag such as
``detect-driver`` or ``detect-framework:pytorch``, which probes should be
tried on this operating system, and in which order. Strategies only build
probe descriptions; running them is the caller's business.
"""

from __future__ import annotations

import ntpath
import os
import platform
import posixpath
from typing import Callable, Mapping

from pydantic import BaseModel

from cuda_doctor.extractors import markers
from cuda_doctor.extractors.base import Probe
from cuda_doctor.utils.errors import ConfigurationError
from cuda_doctor.utils.logging import get_logger

logger = get_logger("strategies")

FRAMEWORK_CAPABILITY = "detect-framework:"


class FrameworkPackage(BaseModel):
    """Where a framework can be found: import name, pip and conda packages."""

    model_config = {"frozen": True}

    module: str
    pip: str
    conda: tuple[str, ...]


FRAMEWORK_PACKAGES: dict[str, FrameworkPackage] = {
    "pytorch": FrameworkPackage(module="torch", pip="torch", conda=("pytorch", "torch")),
    "tensorflow": FrameworkPackage(module="tensorflow", pip="tensorflow", conda=("tensorflow",)),
}


def framework_package(name: str) -> FrameworkPackage:
    """Package coordinates for a framework; unknown names are used verbatim."""
    return FRAMEWORK_PACKAGES.get(name, FrameworkPackage(module=name, pip=name, conda=(name,)))


class PlatformStrategy:
    """Probe lists shared by all platforms.

    Subclasses override the per-category lists where their tools differ.
    """

    tag = "generic"
    os_name = "Unknown"
    python_commands: tuple[str, ...] = ("python3", "python")
    pip_commands: tuple[str, ...] = ("pip3", "pip")
    nvidia_smi = "nvidia-smi"
    nvcc = "nvcc"

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env = dict(os.environ if env is None else env)

    def probes(self, capability: str) -> list[Probe]:
        """Get the ordered fallback probes for a capability tag.

        Unknown tags yield no probes, so the category is reported absent.
        """
        if capability.startswith(FRAMEWORK_CAPABILITY):
            return self.framework_probes(capability[len(FRAMEWORK_CAPABILITY):])

        builders: dict[str, Callable[[], list[Probe]]] = {
            "detect-gpu": self.gpu_probes,
            "detect-driver": self.driver_probes,
            "detect-cuda-toolkit": self.cuda_probes,
            "detect-cudnn": self.cudnn_probes,
        }
        builder = builders.get(capability)
        if builder is None:
            logger.debug(f"{self.tag}: no probes for capability {capability}")
            return []
        return builder()

    # GPU

    def gpu_probes(self) -> list[Probe]:
        return [
            Probe(
                label="nvidia-smi query",
                argv=(
                    self.nvidia_smi,
                    "--query-gpu=index,name,compute_cap,memory.total",
                    "--format=csv,noheader,nounits",
                ),
                pattern=markers.NVIDIA_SMI_GPU_QUERY,
            ),
            Probe(label="nvidia-smi -L", argv=(self.nvidia_smi, "-L"), pattern=markers.NVIDIA_SMI_GPU_LIST),
        ]

    # Driver

    def driver_probes(self) -> list[Probe]:
        return [
            Probe(
                label="nvidia-smi query",
                argv=(self.nvidia_smi, "--query-gpu=driver_version", "--format=csv,noheader"),
                pattern=markers.NVIDIA_SMI_DRIVER_QUERY,
            ),
            Probe(label="nvidia-smi", argv=(self.nvidia_smi,), pattern=markers.NVIDIA_SMI_DRIVER_BANNER),
        ]

    # CUDA toolkit

    def cuda_probes(self) -> list[Probe]:
        probes = [Probe(label="nvcc", argv=(self.nvcc, "--version"), pattern=markers.NVCC_VERSION)]
        for root in self.cuda_roots():
            probes.append(
                Probe(
                    label=f"nvcc ({root})",
                    argv=(self.join(root, "bin", self.nvcc), "--version"),
                    pattern=markers.NVCC_VERSION,
                )
            )
        for root in self.cuda_roots():
            probes.append(
                Probe(label="version.json", path=self.join(root, "version.json"), pattern=markers.CUDA_VERSION_JSON)
            )
            probes.append(
                Probe(label="version.txt", path=self.join(root, "version.txt"), pattern=markers.CUDA_VERSION_TXT)
            )
        probes += self.python_probes(
            "torch",
            "import torch; print('{tag}', 'cuda', torch.version.cuda)",
            markers.python_value("cuda"),
        )
        probes += self.python_probes(
            "tensorflow",
            "import tensorflow as tf; print('{tag}', 'cuda', tf.sysconfig.get_build_info().get('cuda_version'))",
            markers.python_value("cuda"),
        )
        return probes

    # cuDNN

    def cudnn_probes(self) -> list[Probe]:
        probes = [
            Probe(label="cudnn_version.h", path=path, pattern=markers.CUDNN_HEADER)
            for path in self.cudnn_headers()
        ]
        probes += self.python_probes(
            "torch",
            "import torch; print('{tag}', 'cudnn', torch.backends.cudnn.version())",
            markers.python_value("cudnn", encoding="cudnn_int"),
        )
        probes += self.python_probes(
            "tensorflow",
            "import tensorflow as tf; print('{tag}', 'cudnn', tf.sysconfig.get_build_info().get('cudnn_version'))",
            markers.python_value("cudnn"),
        )
        return probes

    def cudnn_headers(self) -> list[str]:
        return [self.join(root, "include", "cudnn_version.h") for root in self.cuda_roots()]

    # Frameworks

    def framework_probes(self, name: str) -> list[Probe]:
        package = framework_package(name)
        probes = self.python_probes(
            package.module,
            f"import {package.module}; print('{{tag}}', '{name}', {package.module}.__version__)",
            markers.python_value(name),
        )
        for pip in self.pip_commands:
            probes.append(
                Probe(label=f"{pip} show {package.pip}", argv=(pip, "show", package.pip), pattern=markers.PIP_SHOW)
            )
        for conda_name in package.conda:
            probes.append(
                Probe(
                    label=f"conda list {conda_name}",
                    argv=("conda", "list", conda_name),
                    pattern=markers.conda_list(conda_name),
                )
            )
        return probes

    # Helpers

    def python_probes(self, module: str, code: str, pattern: markers.TextPattern) -> list[Probe]:
        """One ``python -c`` probe per interpreter name."""
        source = code.replace("{tag}", markers.PYTHON_TAG)
        return [
            Probe(label=f"{python} import {module}", argv=(python, "-c", source), pattern=pattern)
            for python in self.python_commands
        ]

    def cuda_roots(self) -> list[str]:
        """CUDA installation roots to look in, environment first."""
        roots = []
        for var in ("CUDA_HOME", "CUDA_PATH"):
            value = self._env.get(var)
            if value and value not in roots:
                roots.append(value)
        for default in self.default_cuda_roots():
            if default not in roots:
                roots.append(default)
        return roots

    def default_cuda_roots(self) -> list[str]:
        return []

    def join(self, *parts: str) -> str:
        return posixpath.join(*parts)


class LinuxStrategy(PlatformStrategy):
    """Linux: nvidia-smi, /proc, lspci and the usual CUDA prefixes."""

    tag = "linux"
    os_name = "Linux"

    def gpu_probes(self) -> list[Probe]:
        return super().gpu_probes() + [Probe(label="lspci", argv=("lspci",), pattern=markers.LSPCI_GPU)]

    def driver_probes(self) -> list[Probe]:
        probes = super().driver_probes()
        probes.insert(
            1,
            Probe(
                label="/proc/driver/nvidia/version",
                path="/proc/driver/nvidia/version",
                pattern=markers.PROC_DRIVER_VERSION,
            ),
        )
        return probes

    def default_cuda_roots(self) -> list[str]:
        return ["/usr/local/cuda", "/opt/cuda"]

    def cudnn_headers(self) -> list[str]:
        headers = super().cudnn_headers()
        for path in ("/usr/include/cudnn_version.h", "/usr/local/include/cudnn_version.h", "/usr/include/cudnn.h"):
            if path not in headers:
                headers.append(path)
        return headers


class WindowsStrategy(PlatformStrategy):
    """Windows: nvidia-smi, wmic and the CUDA_PATH installation."""

    tag = "windows"
    os_name = "Windows"
    python_commands = ("python", "py")
    pip_commands = ("pip",)
    nvidia_smi = "nvidia-smi.exe"
    nvcc = "nvcc.exe"

    def gpu_probes(self) -> list[Probe]:
        return super().gpu_probes() + [
            Probe(
                label="wmic",
                argv=("wmic", "path", "win32_videocontroller", "get", "name"),
                pattern=markers.WMIC_GPU,
            )
        ]

    def default_cuda_roots(self) -> list[str]:
        return []

    def join(self, *parts: str) -> str:
        return ntpath.join(*parts)


class MacStrategy(PlatformStrategy):
    """macOS: system_profiler for devices, legacy CUDA locations for the toolkit."""

    tag = "macos"
    os_name = "macOS"

    def gpu_probes(self) -> list[Probe]:
        return super().gpu_probes() + [
            Probe(
                label="system_profiler",
                argv=("system_profiler", "SPDisplaysDataType"),
                pattern=markers.SYSTEM_PROFILER_GPU,
            )
        ]

    def default_cuda_roots(self) -> list[str]:
        return ["/usr/local/cuda", "/Developer/NVIDIA/CUDA"]


STRATEGIES: dict[str, type[PlatformStrategy]] = {
    "linux": LinuxStrategy,
    "windows": WindowsStrategy,
    "macos": MacStrategy,
}

_ALIASES = {
    "darwin": "macos",
    "mac": "macos",
    "osx": "macos",
    "win32": "windows",
    "win": "windows",
}


def select_strategy(tag: str | None = None, env: Mapping[str, str] | None = None) -> PlatformStrategy:
    """Pick the probe strategy for a platform.

    Args:
        tag: Explicit platform tag ("linux", "windows", "macos"). When None
            the running platform is detected.
        env: Environment used to locate installations (defaults to os.environ)

    Returns:
        Strategy instance

    Raises:
        ConfigurationError: If an explicit tag names no known platform
    """
    if tag is not None:
        key = tag.strip().lower()
        key = _ALIASES.get(key, key)
        if key not in STRATEGIES:
            raise ConfigurationError(
                f"Unknown platform '{tag}'. Expected one of: {', '.join(STRATEGIES)}",
                config_key="detection.platform",
            )
        return STRATEGIES[key](env)

    system = platform.system().lower()
    key = _ALIASES.get(system, system)
    if key not in STRATEGIES:
        logger.warning(f"Unsupported platform '{platform.system()}', using Linux probes")
        key = "linux"
    return STRATEGIES[key](env)
