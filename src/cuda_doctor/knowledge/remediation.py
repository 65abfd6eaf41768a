"""Installation hints for components that were not detected."""

from __future__ import annotations

from typing import Any


def get_remediation_hints() -> dict[str, dict[str, Any]]:
    """Get remediation hints per fact key and platform.

    Each entry has a ``title``, a ``url`` and step lists keyed by platform
    tag (``linux``, ``windows``, ``macos``) with ``default`` as fallback.

    Returns:
        Dictionary mapping fact keys to hint entries
    """
    return {
        "gpu": {
            "title": "NVIDIA GPU not found",
            "url": "https://www.nvidia.com/Download/index.aspx",
            "default": [
                "Check that the GPU is seated in its PCIe slot and has power connected",
                "Enable the PCIe slot and set the primary display adapter in BIOS",
            ],
            "linux": [
                "Check that the GPU is seated in its PCIe slot and has power connected",
                "lspci | grep -i nvidia",
                "Install a driver so nvidia-smi can see the device",
            ],
            "windows": [
                "Open Device Manager > Display adapters and look for the NVIDIA device",
                "Right-click the device and choose Update driver",
            ],
            "macos": [
                "Current macOS releases do not support NVIDIA GPUs",
                "system_profiler SPDisplaysDataType",
            ],
        },
        "driver": {
            "title": "NVIDIA driver not found",
            "url": "https://www.nvidia.com/Download/index.aspx",
            "default": ["Download the driver for your GPU from the NVIDIA website"],
            "linux": [
                "Ubuntu/Debian: sudo apt install nvidia-driver-535 && sudo reboot",
                "Fedora/RHEL: sudo dnf install akmod-nvidia && sudo akmods --force && sudo reboot",
                "Arch: sudo pacman -S nvidia nvidia-utils && sudo reboot",
                "Verify with nvidia-smi or cat /proc/driver/nvidia/version",
            ],
            "windows": [
                "Download the driver for your GPU and run the installer as Administrator",
                "Choose Custom (Advanced) for a clean install, then restart",
                "Use DDU to remove old drivers if the install fails",
            ],
        },
        "cuda_toolkit": {
            "title": "CUDA toolkit not found",
            "url": "https://developer.nvidia.com/cuda-downloads",
            "default": ["Install the CUDA toolkit from the NVIDIA website", "Verify with nvcc --version"],
            "linux": [
                "sudo apt install cuda-toolkit (after adding the NVIDIA CUDA repository)",
                "export PATH=/usr/local/cuda/bin:$PATH",
                "export LD_LIBRARY_PATH=/usr/local/cuda/lib64:$LD_LIBRARY_PATH",
                "Verify with nvcc --version",
            ],
            "windows": [
                "Run the CUDA installer as Administrator and choose Custom",
                r"Set CUDA_PATH to C:\Program Files\NVIDIA GPU Computing Toolkit\CUDA\vX.Y",
                "Add %CUDA_PATH%\\bin to PATH",
                "Verify with nvcc --version",
            ],
        },
        "cudnn": {
            "title": "cuDNN not found",
            "url": "https://developer.nvidia.com/cudnn",
            "default": [
                "Download the cuDNN build matching your CUDA version",
                "conda install cudnn",
            ],
            "linux": [
                "sudo cp cuda/include/cudnn*.h /usr/local/cuda/include",
                "sudo cp cuda/lib64/libcudnn* /usr/local/cuda/lib64",
                "sudo chmod a+r /usr/local/cuda/include/cudnn*.h /usr/local/cuda/lib64/libcudnn*",
                "Verify: /usr/local/cuda/include/cudnn_version.h exists",
            ],
            "windows": [
                "Copy the archive's bin, include and lib folders into %CUDA_PATH%",
                "Verify: %CUDA_PATH%\\include\\cudnn_version.h exists",
            ],
        },
        "framework:tensorflow": {
            "title": "TensorFlow not found",
            "url": "https://www.tensorflow.org/install",
            "default": [
                "pip install tensorflow[and-cuda]",
                "conda install tensorflow",
                "python -c \"import tensorflow as tf; print(tf.config.list_physical_devices('GPU'))\"",
            ],
        },
        "framework:pytorch": {
            "title": "PyTorch not found",
            "url": "https://pytorch.org/get-started/locally/",
            "default": [
                "pip install torch --index-url https://download.pytorch.org/whl/cu121",
                "conda install pytorch pytorch-cuda=11.8 -c pytorch -c nvidia",
                "python -c \"import torch; print(torch.cuda.is_available())\"",
            ],
        },
    }


def get_remediation(key: str, platform_tag: str = "linux") -> dict[str, Any] | None:
    """Get the hint for one missing component on one platform.

    Args:
        key: Fact key, e.g. "driver" or "framework:pytorch"
        platform_tag: Platform strategy tag

    Returns:
        Dictionary with title, url and steps, or None if there is no hint
    """
    hints = get_remediation_hints()
    entry = hints.get(key)
    if entry is None and key.startswith("gpu"):
        entry = hints["gpu"]
    if entry is None:
        return None
    return {
        "title": entry["title"],
        "url": entry["url"],
        "steps": list(entry.get(platform_tag, entry["default"])),
    }
