"""Shared test fixtures for cuda-doctor tests."""

from datetime import datetime, timezone
from typing import Sequence

import pytest

from cuda_doctor.core.runner import CommandOutput
from cuda_doctor.core.snapshot import HostInfo
from cuda_doctor.core.version import parse
from cuda_doctor.models.facts import Category, ComponentFact
from cuda_doctor.models.snapshot import EnvironmentSnapshot, SystemDescriptor
from cuda_doctor.utils.config import set_config
from cuda_doctor.utils.errors import CommandNotFoundError

FIXED_TIME = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


# Probe output captured from real machines

NVIDIA_SMI_GPU_QUERY = "0, NVIDIA GeForce RTX 3090, 8.6, 24576\n1, NVIDIA A100-SXM4-80GB, 8.0, 81920\n"

NVIDIA_SMI_GPU_LIST = (
    "GPU 0: NVIDIA GeForce RTX 3090 (UUID: GPU-5f3c8b1e-2a4d-11ee-be56-0242ac120002)\n"
    "GPU 1: Tesla V100-PCIE-16GB (UUID: GPU-8a1b2c3d-4e5f-6789-abcd-ef0123456789)\n"
)

LSPCI_OUTPUT = (
    "00:00.0 Host bridge: Intel Corporation 8th Gen Core Processor Host Bridge/DRAM Registers (rev 07)\n"
    "00:02.0 VGA compatible controller: Intel Corporation UHD Graphics 630 (rev 02)\n"
    "01:00.0 VGA compatible controller: NVIDIA Corporation GA102 [GeForce RTX 3090] (rev a1)\n"
    "01:00.1 Audio device: NVIDIA Corporation GA102 High Definition Audio Controller (rev a1)\n"
)

NVIDIA_SMI_DRIVER_QUERY = "535.104.05\n535.104.05\n"

NVIDIA_SMI_BANNER = """\
Fri Mar  1 12:00:00 2024
+---------------------------------------------------------------------------------------+
| NVIDIA-SMI 535.104.05             Driver Version: 535.104.05   CUDA Version: 12.2     |
|-----------------------------------------+----------------------+----------------------+
| GPU  Name                 Persistence-M | Bus-Id        Disp.A | Volatile Uncorr. ECC |
"""

PROC_DRIVER_VERSION = (
    "NVRM version: NVIDIA UNIX x86_64 Kernel Module  535.104.05  Sat Aug 19 01:15:15 UTC 2023\n"
    "GCC version:  gcc version 12.3.0 (Ubuntu 12.3.0-1ubuntu1~22.04)\n"
)

NVCC_OUTPUT = """\
nvcc: NVIDIA (R) Cuda compiler driver
Copyright (c) 2005-2023 NVIDIA Corporation
Built on Tue_Jun_13_19:16:58_PDT_2023
Cuda compilation tools, release 12.2, V12.2.140
Build cuda_12.2.r12.2/compiler.32965470_0
"""

CUDA_VERSION_TXT = "CUDA Version 11.8.89\n"

CUDA_VERSION_JSON = """\
{
   "cuda" : {
      "name" : "CUDA SDK",
      "version" : "12.1.1"
   },
   "cuda_cudart" : {
      "name" : "CUDA Runtime (cudart)",
      "version" : "12.1.105"
   }
}
"""

CUDNN_HEADER = """\
#ifndef CUDNN_VERSION_H_
#define CUDNN_VERSION_H_

#define CUDNN_MAJOR 8
#define CUDNN_MINOR 9
#define CUDNN_PATCHLEVEL 2

#define CUDNN_VERSION (CUDNN_MAJOR * 1000 + CUDNN_MINOR * 100 + CUDNN_PATCHLEVEL)
#endif
"""

PIP_SHOW_TORCH = """\
Name: torch
Version: 2.1.0+cu121
Summary: Tensors and Dynamic neural networks in Python with strong GPU acceleration
Home-page: https://pytorch.org/
"""

CONDA_LIST_PYTORCH = """\
# packages in environment at /opt/conda:
#
# Name                    Version                   Build  Channel
pytorch                   2.0.1           py3.10_cuda11.8_cudnn8.7.0_0    pytorch
pytorch-cuda              11.8                 h7e8668a_5    pytorch
"""

# Command prefixes used by the Linux strategy
GPU_QUERY_CMD = "nvidia-smi --query-gpu=index,name,compute_cap,memory.total --format=csv,noheader,nounits"
DRIVER_QUERY_CMD = "nvidia-smi --query-gpu=driver_version --format=csv,noheader"
TORCH_VERSION_CMD = "python3 -c import torch; print('cuda-doctor:', 'pytorch'"
CUDNN_HEADER_PATH = "/usr/local/cuda/include/cudnn_version.h"


class FakeRunner:
    """Command runner answering from canned output.

    Commands are looked up by their space-joined command line, exactly in
    ``commands`` or by leading text in ``prefixes`` (for long python -c
    probes). Unknown commands and files raise CommandNotFoundError, like a
    missing executable.
    """

    def __init__(
        self,
        commands: dict[str, str | CommandOutput | Exception] | None = None,
        files: dict[str, str] | None = None,
        prefixes: dict[str, str | CommandOutput | Exception] | None = None,
    ) -> None:
        self.commands = dict(commands or {})
        self.prefixes = dict(prefixes or {})
        self.files = dict(files or {})
        self.calls: list[str] = []

    def run(self, argv: Sequence[str], timeout: float = 10.0) -> CommandOutput:
        target = " ".join(argv)
        self.calls.append(target)
        response = self.commands.get(target)
        if response is None:
            for prefix, candidate in self.prefixes.items():
                if target.startswith(prefix):
                    response = candidate
                    break
        if response is None:
            raise CommandNotFoundError(target, "No such file or directory")
        if isinstance(response, Exception):
            raise response
        if isinstance(response, CommandOutput):
            return response
        return CommandOutput(target=target, stdout=response)

    def read(self, path: str) -> CommandOutput:
        self.calls.append(path)
        if path not in self.files:
            raise CommandNotFoundError(path, "No such file or directory")
        return CommandOutput(target=path, stdout=self.files[path])


class FakeSystemInfo:
    """System-info provider returning a fixed host."""

    def __init__(self, os_name: str = "Linux", arch: str = "x86_64") -> None:
        self.os_name = os_name
        self.arch = arch

    def collect(self) -> HostInfo:
        return HostInfo(
            os_name=self.os_name,
            arch=self.arch,
            hostname="gpu-box",
            system=SystemDescriptor(
                os_version="Linux-6.5.0-x86_64-with-glibc2.35",
                kernel="6.5.0",
                cpu="x86_64",
                cpu_cores_physical=8,
                cpu_cores_logical=16,
                total_memory_gb=62.7,
                python_version="3.11.6",
            ),
        )


@pytest.fixture(autouse=True)
def reset_config():
    """Use the default configuration, never a config file on the test machine."""
    from cuda_doctor.utils.config import DoctorConfig

    set_config(DoctorConfig())
    yield
    set_config(None)


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Runner for a Linux box with one complete CUDA 12.2 stack."""
    return FakeRunner(
        commands={
            GPU_QUERY_CMD: "0, NVIDIA GeForce RTX 3090, 8.6, 24576\n",
            DRIVER_QUERY_CMD: "535.104.05\n",
            "nvcc --version": NVCC_OUTPUT,
            "ldconfig -p": (
                "\tlibcuda.so.1 (libc6,x86-64) => /lib/x86_64-linux-gnu/libcuda.so.1\n"
                "\tlibcudart.so.12 (libc6,x86-64) => /usr/local/cuda/lib64/libcudart.so.12\n"
                "\tlibcudart.so (libc6,x86-64) => /usr/local/cuda/lib64/libcudart.so\n"
                "\tlibcublas.so (libc6,x86-64) => /usr/local/cuda/lib64/libcublas.so\n"
                "\tlibcudnn.so (libc6,x86-64) => /usr/lib/x86_64-linux-gnu/libcudnn.so\n"
            ),
        },
        files={CUDNN_HEADER_PATH: CUDNN_HEADER},
        prefixes={TORCH_VERSION_CMD: "cuda-doctor: pytorch 2.1.0+cu121\n"},
    )


@pytest.fixture
def empty_runner() -> FakeRunner:
    """Runner for a machine with nothing installed."""
    return FakeRunner()


@pytest.fixture
def fake_system_info() -> FakeSystemInfo:
    return FakeSystemInfo()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_TIME


def make_fact(category: Category, version: str | None = None, **kwargs) -> ComponentFact:
    """Build a present fact from version text."""
    return ComponentFact.detected(category, parse(version) if version else None, **kwargs)


@pytest.fixture
def sample_snapshot() -> EnvironmentSnapshot:
    """Snapshot of a working CUDA 12.2 machine."""
    return EnvironmentSnapshot(
        captured_at=FIXED_TIME,
        os_name="Linux",
        arch="x86_64",
        hostname="gpu-box",
        system=SystemDescriptor(python_version="3.11.6", total_memory_gb=62.7),
        facts=[
            make_fact(Category.GPU, "8.6", name="NVIDIA GeForce RTX 3090", index=0, method="nvidia-smi query"),
            make_fact(Category.DRIVER, "535.104.05", method="nvidia-smi query"),
            make_fact(Category.CUDA_TOOLKIT, "12.2", method="nvcc"),
            make_fact(Category.CUDNN, "8.9.2", method="cudnn_version.h"),
            make_fact(Category.FRAMEWORK, "2.1.0+cu121", name="pytorch", method="python3 import torch"),
            ComponentFact.absent(Category.FRAMEWORK, name="tensorflow"),
        ],
    )


@pytest.fixture
def other_snapshot() -> EnvironmentSnapshot:
    """Snapshot of a colleague's machine on CUDA 11.8 with TensorFlow."""
    return EnvironmentSnapshot(
        captured_at=FIXED_TIME,
        os_name="Linux",
        arch="x86_64",
        facts=[
            make_fact(Category.GPU, "8.6", name="NVIDIA GeForce RTX 3090", index=0),
            make_fact(Category.DRIVER, "520.61.05"),
            make_fact(Category.CUDA_TOOLKIT, "11.8"),
            ComponentFact.absent(Category.CUDNN),
            ComponentFact.absent(Category.FRAMEWORK, name="pytorch"),
            make_fact(Category.FRAMEWORK, "2.13.0", name="tensorflow"),
        ],
    )
