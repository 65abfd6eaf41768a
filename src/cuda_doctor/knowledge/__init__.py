"""CUDA stack knowledge base.

Contains curated information about GPU compute capabilities, version
compatibility between drivers, toolkits and frameworks, and installation
hints.
"""

from cuda_doctor.knowledge.gpu_matrix import get_gpu_matrix, lookup_gpu
from cuda_doctor.knowledge.compat_matrix import (
    LATEST_KNOWN,
    UPDATE_SOURCES,
    get_compat_matrix,
    get_recommended_stacks,
    get_rule_table,
    latest_version_rules,
)
from cuda_doctor.knowledge.remediation import get_remediation, get_remediation_hints

__all__ = [
    "get_gpu_matrix",
    "lookup_gpu",
    "LATEST_KNOWN",
    "UPDATE_SOURCES",
    "get_compat_matrix",
    "get_recommended_stacks",
    "get_rule_table",
    "latest_version_rules",
    "get_remediation",
    "get_remediation_hints",
]
