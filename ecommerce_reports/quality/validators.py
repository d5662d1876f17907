"""
Data Validation Module

Rule-based quality checks over snapshot relations.

Features:
- Null and uniqueness checks on keys
- Range/boundary checks on quantities and prices
- Allowed-value checks on statuses and flags
- Referential integrity checks between relations

Validation never blocks reporting: the engine skips unjoinable rows, so
integrity problems are reported as warnings for the data owner.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import polars as pl
import structlog

from ecommerce_reports.data.models import OrderStatus
from ecommerce_reports.data.snapshot import Snapshot

logger = structlog.get_logger(__name__)


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    details: Optional[Dict[str, Any]] = None
    failed_rows: int = 0
    total_rows: int = 0


@dataclass
class ValidationResult:
    """Complete validation suite result"""
    status: ValidationStatus
    total_checks: int
    passed_checks: int
    failed_checks: int
    warning_count: int
    checks: List[ValidationCheck] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        """Percentage of passed checks"""
        if self.total_checks == 0:
            return 100.0
        return (self.passed_checks / self.total_checks) * 100


def _missing_column(name: str, column: str, severity: ValidationSeverity) -> ValidationCheck:
    return ValidationCheck(
        name=name,
        passed=False,
        severity=severity,
        message=f"Column '{column}' not found",
    )


class DataValidator:
    """
    Chainable validator for a single relation.

    Example:
        validator = DataValidator()
        validator.add_unique_check("order_id")
        validator.add_enum_check("order_status", ["completed", "cancelled", "returned"])
        result = validator.validate(df)
    """

    def __init__(self, strict_mode: bool = False):
        self.strict_mode = strict_mode  # Fail on any warning
        self._checks: List[Callable[[pl.DataFrame], ValidationCheck]] = []

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for null values in column"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"not_null_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

            null_count = df[column].null_count()
            total = len(df)
            passed = null_count == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {null_count} null values" if not passed else f"Column '{column}' has no null values",
                details={"null_count": null_count},
                failed_rows=null_count,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_unique_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for uniqueness of column values"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"unique_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

            total = len(df)
            duplicate_count = total - df[column].n_unique()
            passed = duplicate_count == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {duplicate_count} duplicate values" if not passed else f"Column '{column}' values are unique",
                details={"duplicate_count": duplicate_count},
                failed_rows=duplicate_count,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values within an inclusive range"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"range_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

            conditions = []
            if min_value is not None:
                conditions.append(pl.col(column) < min_value)
            if max_value is not None:
                conditions.append(pl.col(column) > max_value)

            if not conditions:
                return ValidationCheck(name=name, passed=True, severity=severity, message="No range specified")

            combined = conditions[0]
            for cond in conditions[1:]:
                combined = combined | cond

            out_of_range = df.filter(combined).height
            passed = out_of_range == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {out_of_range} values outside range [{min_value}, {max_value}]" if not passed else "All values in range",
                details={"min": min_value, "max": max_value, "out_of_range_count": out_of_range},
                failed_rows=out_of_range,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def add_positive_check(
        self,
        column: str,
        allow_zero: bool = True,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for non-negative (or strictly positive) values"""
        min_val = 0 if allow_zero else 1
        return self.add_range_check(column, min_value=min_val, severity=severity)

    def add_enum_check(
        self,
        column: str,
        allowed_values: List[str],
        case_insensitive: bool = False,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values in an allowed set"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"enum_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

            values = pl.col(column)
            allowed = allowed_values
            if case_insensitive:
                values = values.str.to_lowercase()
                allowed = [v.lower() for v in allowed_values]

            invalid = df.filter(~values.is_in(allowed) & pl.col(column).is_not_null()).height
            passed = invalid == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {invalid} invalid values" if not passed else "All values are valid",
                details={"allowed_values": allowed_values, "invalid_count": invalid},
                failed_rows=invalid,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def add_custom_check(
        self,
        name: str,
        check_func: Callable[[pl.DataFrame], bool],
        message_on_fail: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add a check backed by an arbitrary predicate over the frame"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            passed = bool(check_func(df))
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message="Check passed" if passed else message_on_fail,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def add_referential_integrity_check(
        self,
        column: str,
        reference_df: pl.DataFrame,
        reference_column: str,
        severity: ValidationSeverity = ValidationSeverity.WARNING,
    ) -> "DataValidator":
        """Add check that every value of ``column`` exists in the referenced relation"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"ref_integrity_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

            orphans = df.join(
                reference_df.select(pl.col(reference_column).alias(column)).unique(),
                on=column,
                how="anti",
            ).filter(pl.col(column).is_not_null()).height
            passed = orphans == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {orphans} orphan records" if not passed else "Referential integrity maintained",
                details={"orphan_count": orphans},
                failed_rows=orphans,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """
        Run all validation checks on DataFrame.

        Args:
            df: DataFrame to validate

        Returns:
            ValidationResult with all check results
        """
        started_at = datetime.now(timezone.utc)
        results = []

        for check_func in self._checks:
            result = check_func(df)
            results.append(result)

            if not result.passed:
                logger.warning(
                    f"Validation failed: {result.name}",
                    message=result.message,
                    severity=result.severity.value,
                )

        passed_checks = sum(1 for r in results if r.passed)
        failed_checks = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.ERROR)
        warning_count = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.WARNING)

        if failed_checks > 0:
            status = ValidationStatus.FAILED
        elif warning_count > 0 and self.strict_mode:
            status = ValidationStatus.FAILED
        elif warning_count > 0:
            status = ValidationStatus.PARTIAL
        else:
            status = ValidationStatus.PASSED

        return ValidationResult(
            status=status,
            total_checks=len(results),
            passed_checks=passed_checks,
            failed_checks=failed_checks,
            warning_count=warning_count,
            checks=results,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
        )


# Pre-built validators for the snapshot relations
def create_customers_validator() -> DataValidator:
    return (
        DataValidator()
        .add_not_null_check("customer_id")
        .add_unique_check("customer_id")
        .add_not_null_check("customer_name")
        .add_range_check("age", min_value=0, max_value=120, severity=ValidationSeverity.WARNING)
    )


def create_products_validator() -> DataValidator:
    return (
        DataValidator()
        .add_unique_check("product_id")
        .add_not_null_check("category")
        .add_positive_check("price_cents")
        .add_positive_check("cost_cents")
        .add_custom_check(
            name="cost_not_above_price",
            check_func=lambda df: df.filter(pl.col("cost_cents") > pl.col("price_cents")).height == 0,
            message_on_fail="Some products cost more than their price",
            severity=ValidationSeverity.WARNING,
        )
    )


def create_orders_validator(customers: pl.DataFrame) -> DataValidator:
    return (
        DataValidator()
        .add_unique_check("order_id")
        .add_not_null_check("order_date")
        .add_enum_check("order_status", [s.value for s in OrderStatus])
        .add_referential_integrity_check("customer_id", customers, "customer_id")
    )


def create_order_items_validator(orders: pl.DataFrame, products: pl.DataFrame) -> DataValidator:
    return (
        DataValidator()
        .add_unique_check("order_item_id")
        .add_positive_check("quantity")
        .add_positive_check("final_price_cents")
        .add_referential_integrity_check("order_id", orders, "order_id")
        .add_referential_integrity_check("product_id", products, "product_id")
    )


def create_website_activity_validator(customers: pl.DataFrame) -> DataValidator:
    return (
        DataValidator()
        .add_unique_check("session_id")
        .add_not_null_check("traffic_source")
        .add_positive_check("pages_viewed")
        .add_enum_check("purchase_made", ["yes", "no"], case_insensitive=True)
        .add_referential_integrity_check("customer_id", customers, "customer_id")
    )


def validate_snapshot(snapshot: Snapshot) -> Dict[str, ValidationResult]:
    """
    Run the pre-built validators over every relation of a snapshot.

    Returns:
        Validation results keyed by relation name
    """
    validators = {
        "customers": create_customers_validator(),
        "products": create_products_validator(),
        "orders": create_orders_validator(snapshot.customers),
        "order_items": create_order_items_validator(snapshot.orders, snapshot.products),
        "website_activity": create_website_activity_validator(snapshot.customers),
    }

    results = {name: validator.validate(getattr(snapshot, name)) for name, validator in validators.items()}

    logger.info(
        "Snapshot validation complete",
        **{name: result.status.value for name, result in results.items()},
    )
    return results
