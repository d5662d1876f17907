"""
Post-load quality checks shared by the snapshot loaders.
"""

from typing import Dict

import structlog

from ecommerce_reports.data.snapshot import Snapshot
from ecommerce_reports.quality.validators import ValidationResult, ValidationStatus, validate_snapshot

logger = structlog.get_logger(__name__)


def run_quality_checks(snapshot: Snapshot) -> Dict[str, ValidationResult]:
    """Validate a freshly loaded snapshot; failures are logged, never raised"""
    results = validate_snapshot(snapshot)
    for relation, result in results.items():
        if result.status != ValidationStatus.PASSED:
            logger.warning(
                "Snapshot relation has quality issues",
                relation=relation,
                status=result.status.value,
                failed=[c.name for c in result.checks if not c.passed],
            )
    return results
