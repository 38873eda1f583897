"""Executive layer — digest assembly, action items, pipeline wiring."""

from bizdigest.executive.actions import sort_by_priority, synthesize_actions
from bizdigest.executive.aggregator import ExecutiveAggregator, build_digest, partition_alerts
from bizdigest.executive.exceptions import (
    DigestError,
    DigestGenerationError,
    DomainUnavailableError,
)
from bizdigest.executive.factory import create_executive

__all__ = [
    "DigestError",
    "DigestGenerationError",
    "DomainUnavailableError",
    "ExecutiveAggregator",
    "build_digest",
    "create_executive",
    "partition_alerts",
    "sort_by_priority",
    "synthesize_actions",
]
