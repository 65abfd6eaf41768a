"""Known NVIDIA GPUs and their compute capability.

Used to fill in the compute capability of devices found through probes that
only report a name (``nvidia-smi -L``, ``lspci``, ``wmic``).
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any


def get_gpu_matrix() -> dict[str, dict[str, Any]]:
    """Get the GPU matrix.

    Keys are name fragments as they appear in device names.

    Returns:
        Dictionary mapping GPU name fragments to their specifications
    """
    return {
        # Hopper
        "H100": {"architecture": "Hopper", "compute_capability": "9.0", "memory_gb": 80},
        "H200": {"architecture": "Hopper", "compute_capability": "9.0", "memory_gb": 141},
        # Ada Lovelace
        "L40S": {"architecture": "Ada Lovelace", "compute_capability": "8.9", "memory_gb": 48},
        "L40": {"architecture": "Ada Lovelace", "compute_capability": "8.9", "memory_gb": 48},
        "L4": {"architecture": "Ada Lovelace", "compute_capability": "8.9", "memory_gb": 24},
        "RTX 6000 Ada": {"architecture": "Ada Lovelace", "compute_capability": "8.9", "memory_gb": 48},
        "RTX 4090": {"architecture": "Ada Lovelace", "compute_capability": "8.9", "memory_gb": 24},
        "RTX 4080": {"architecture": "Ada Lovelace", "compute_capability": "8.9", "memory_gb": 16},
        "RTX 4070": {"architecture": "Ada Lovelace", "compute_capability": "8.9", "memory_gb": 12},
        "RTX 4060": {"architecture": "Ada Lovelace", "compute_capability": "8.9", "memory_gb": 8},
        # Ampere
        "A100": {"architecture": "Ampere", "compute_capability": "8.0", "memory_gb": 80},
        "A30": {"architecture": "Ampere", "compute_capability": "8.0", "memory_gb": 24},
        "A10": {"architecture": "Ampere", "compute_capability": "8.6", "memory_gb": 24},
        "A10G": {"architecture": "Ampere", "compute_capability": "8.6", "memory_gb": 24},
        "A40": {"architecture": "Ampere", "compute_capability": "8.6", "memory_gb": 48},
        "RTX A6000": {"architecture": "Ampere", "compute_capability": "8.6", "memory_gb": 48},
        "RTX A5000": {"architecture": "Ampere", "compute_capability": "8.6", "memory_gb": 24},
        "RTX A4000": {"architecture": "Ampere", "compute_capability": "8.6", "memory_gb": 16},
        "RTX 3090": {"architecture": "Ampere", "compute_capability": "8.6", "memory_gb": 24},
        "RTX 3080": {"architecture": "Ampere", "compute_capability": "8.6", "memory_gb": 10},
        "RTX 3070": {"architecture": "Ampere", "compute_capability": "8.6", "memory_gb": 8},
        "RTX 3060": {"architecture": "Ampere", "compute_capability": "8.6", "memory_gb": 12},
        "RTX 3050": {"architecture": "Ampere", "compute_capability": "8.6", "memory_gb": 8},
        # Turing
        "T4": {"architecture": "Turing", "compute_capability": "7.5", "memory_gb": 16},
        "RTX 2080": {"architecture": "Turing", "compute_capability": "7.5", "memory_gb": 8},
        "RTX 2070": {"architecture": "Turing", "compute_capability": "7.5", "memory_gb": 8},
        "RTX 2060": {"architecture": "Turing", "compute_capability": "7.5", "memory_gb": 6},
        "GTX 1660": {"architecture": "Turing", "compute_capability": "7.5", "memory_gb": 6},
        "GTX 1650": {"architecture": "Turing", "compute_capability": "7.5", "memory_gb": 4},
        # Volta
        "V100": {"architecture": "Volta", "compute_capability": "7.0", "memory_gb": 32},
        "TITAN V": {"architecture": "Volta", "compute_capability": "7.0", "memory_gb": 12},
        # Pascal
        "P100": {"architecture": "Pascal", "compute_capability": "6.0", "memory_gb": 16},
        "P40": {"architecture": "Pascal", "compute_capability": "6.1", "memory_gb": 24},
        "P4": {"architecture": "Pascal", "compute_capability": "6.1", "memory_gb": 8},
        "GTX 1080": {"architecture": "Pascal", "compute_capability": "6.1", "memory_gb": 8},
        "GTX 1070": {"architecture": "Pascal", "compute_capability": "6.1", "memory_gb": 8},
        "GTX 1060": {"architecture": "Pascal", "compute_capability": "6.1", "memory_gb": 6},
        "GTX 1050": {"architecture": "Pascal", "compute_capability": "6.1", "memory_gb": 4},
        # Maxwell
        "GTX 980": {"architecture": "Maxwell", "compute_capability": "5.2", "memory_gb": 4},
        "GTX 970": {"architecture": "Maxwell", "compute_capability": "5.2", "memory_gb": 4},
        "GTX 960": {"architecture": "Maxwell", "compute_capability": "5.2", "memory_gb": 2},
        "GTX 750": {"architecture": "Maxwell", "compute_capability": "5.0", "memory_gb": 2},
        "M60": {"architecture": "Maxwell", "compute_capability": "5.2", "memory_gb": 16},
        # Kepler
        "K80": {"architecture": "Kepler", "compute_capability": "3.7", "memory_gb": 24},
        "GTX 780": {"architecture": "Kepler", "compute_capability": "3.5", "memory_gb": 3},
        "GT 750M": {"architecture": "Kepler", "compute_capability": "3.0", "memory_gb": 2},
    }


@lru_cache(maxsize=1)
def _fragment_patterns() -> list[tuple[str, re.Pattern[str]]]:
    # Longest fragments first so "A100" is preferred over "A10".
    fragments = sorted(get_gpu_matrix(), key=len, reverse=True)
    return [
        (fragment, re.compile(rf"(?<![A-Za-z0-9]){re.escape(fragment)}(?![0-9])", re.IGNORECASE))
        for fragment in fragments
    ]


def lookup_gpu(device_name: str) -> tuple[str, dict[str, Any]] | None:
    """Find the matrix entry for a device name.

    Args:
        device_name: Name as reported by a probe, e.g. "NVIDIA GeForce RTX 3090"

    Returns:
        (fragment, specification) or None if the device is not known
    """
    matrix = get_gpu_matrix()
    for fragment, pattern in _fragment_patterns():
        if pattern.search(device_name):
            return fragment, matrix[fragment]
    return None
