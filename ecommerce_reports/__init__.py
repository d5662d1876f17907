"""
E-Commerce Reporting Engine

Analytical reports (sales, growth, customer value, conversion, RFM
segmentation) over a snapshot of customers, products, orders, order items and
website activity.
"""
from ecommerce_reports.data import Snapshot, SnapshotValidationError
from ecommerce_reports.reporting import ReportEngine, ReportResult

__version__ = "1.0.0"

__all__ = [
    "Snapshot",
    "SnapshotValidationError",
    "ReportEngine",
    "ReportResult",
]
