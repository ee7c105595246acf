from __future__ import annotations

from .usage import DiskUsage
from .usageconfig import UsageConfig
from .usagemodel import Stats
from .usagepool import UsagePool
from .usagepool import UsageResult
from .usagetracker import LargestFiles

__all__ = [
    "DiskUsage",
    "LargestFiles",
    "Stats",
    "UsageConfig",
    "UsagePool",
    "UsageResult",
]
