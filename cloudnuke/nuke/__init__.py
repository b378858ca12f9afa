"""Resource nuking engine.

This module resolves what to nuke, filters candidates, deletes them in bounded
batches and aggregates the outcome of every identifier.

Classes:
    ResourceNuker: Main orchestrator for discovery and deletion
    PlanResolver: Region and resource type selection
    FilterEvaluator: Candidate scope evaluation
    BatchController: Batching and bounded concurrency
    ResultAggregator: Per-identifier outcome aggregation
    AuditStorage: Audit log storage and retrieval
"""

from __future__ import annotations

__all__ = [
    "ResourceNuker",
    "PlanResolver",
    "FilterEvaluator",
    "BatchController",
    "ResultAggregator",
    "AuditStorage",
]

from .aggregator import ResultAggregator
from .audit import AuditStorage
from .batching import BatchController
from .filters import FilterEvaluator
from .nuker import ResourceNuker
from .planner import PlanResolver
