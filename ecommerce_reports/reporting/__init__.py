"""
Reporting Module
"""
from .engine import ReportDefinition, ReportEngine, ReportResult
from .rows import CustomerSegment, CustomerType

__all__ = [
    "ReportDefinition",
    "ReportEngine",
    "ReportResult",
    "CustomerSegment",
    "CustomerType",
]
