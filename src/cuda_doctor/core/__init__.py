"""Core domain logic for cuda-doctor.

This module provides the main library API for diagnosing the local
GPU / driver / CUDA / cuDNN / framework stack.
"""

from cuda_doctor.core.runner import CommandOutput, CommandRunner, SubprocessRunner
from cuda_doctor.core.version import Ordering, covers, parse, same_version, try_parse
from cuda_doctor.core.compat import CompatibilityEngine, rule_order, validate_rule_table
from cuda_doctor.core.compare import compare_snapshots
from cuda_doctor.core.snapshot import HostInfo, LocalSystemInfo, SnapshotCollector, SystemInfoProvider
from cuda_doctor.core.persistence import dumps_snapshot, load_snapshot, loads_snapshot, save_snapshot
from cuda_doctor.core.updates import check_updates
from cuda_doctor.core.validate import ConfigValidator
from cuda_doctor.core.doctor import Doctor

__all__ = [
    # Runner
    "CommandOutput",
    "CommandRunner",
    "SubprocessRunner",
    # Version
    "Ordering",
    "covers",
    "parse",
    "same_version",
    "try_parse",
    # Compatibility
    "CompatibilityEngine",
    "rule_order",
    "validate_rule_table",
    # Snapshots
    "HostInfo",
    "LocalSystemInfo",
    "SnapshotCollector",
    "SystemInfoProvider",
    "compare_snapshots",
    "dumps_snapshot",
    "load_snapshot",
    "loads_snapshot",
    "save_snapshot",
    # Modes
    "check_updates",
    "ConfigValidator",
    "Doctor",
]
