"""
Record Validation

Rule-based checks over the order, line-item and product frames the metrics
engine reads. Failed checks never stop a computation; they are logged and
reported through the data quality score.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence

import polars as pl
import structlog

from storefront_analytics.analytics.frames import OrderFrames
from storefront_analytics.analytics.records import OrderStatus

logger = structlog.get_logger(__name__)


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"  # Data the engine will misreport
    WARNING = "warning"  # Suspicious but usable


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
    failed_rows: int = 0
    total_rows: int = 0


@dataclass
class ValidationResult:
    """Complete validation suite result"""
    dataset: str
    status: ValidationStatus
    checks: List[ValidationCheck] = field(default_factory=list)

    @property
    def failed(self) -> List[ValidationCheck]:
        return [check for check in self.checks if not check.passed]

    @property
    def success_rate(self) -> float:
        """Percentage of passed checks"""
        if not self.checks:
            return 100.0
        return (len(self.checks) - len(self.failed)) * 100 / len(self.checks)


CheckFunc = Callable[[pl.DataFrame], ValidationCheck]


class DataValidator:
    """
    Chainable validator for one record frame.

    Example:
        validator = DataValidator("orders")
        validator.add_not_null_check("order_id")
        validator.add_range_check("total_price", min_value=0)
        result = validator.validate(frames.orders)
    """

    def __init__(self, dataset: str):
        self.dataset = dataset
        self._checks: List[CheckFunc] = []

    def _count_check(
        self,
        name: str,
        column: str,
        violation: Callable[[], pl.Expr],
        describe: Callable[[int], str],
        severity: ValidationSeverity,
    ) -> "DataValidator":
        """Register a check that fails when any row matches `violation`"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            if column not in df.columns:
                return ValidationCheck(
                    name=name,
                    passed=False,
                    severity=severity,
                    message=f"Column '{column}' not found",
                )
            failed_rows = df.filter(violation()).height
            return ValidationCheck(
                name=name,
                passed=failed_rows == 0,
                severity=severity,
                message=describe(failed_rows),
                failed_rows=failed_rows,
                total_rows=df.height,
            )

        self._checks.append(check)
        return self

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for null values in column"""
        return self._count_check(
            f"not_null_{column}",
            column,
            lambda: pl.col(column).is_null(),
            lambda n: f"{self.dataset}.{column} has {n} null values",
            severity,
        )

    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values within [min_value, max_value]"""
        def violation() -> pl.Expr:
            expr = pl.lit(False)
            if min_value is not None:
                expr = expr | (pl.col(column) < min_value)
            if max_value is not None:
                expr = expr | (pl.col(column) > max_value)
            return expr

        return self._count_check(
            f"range_{column}",
            column,
            violation,
            lambda n: f"{self.dataset}.{column} has {n} values outside [{min_value}, {max_value}]",
            severity,
        )

    def add_enum_check(
        self,
        column: str,
        allowed_values: Sequence[Any],
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values in allowed set"""
        allowed = list(allowed_values)
        return self._count_check(
            f"enum_{column}",
            column,
            lambda: ~pl.col(column).is_in(allowed) & pl.col(column).is_not_null(),
            lambda n: f"{self.dataset}.{column} has {n} unknown values",
            severity,
        )

    def add_referential_integrity_check(
        self,
        column: str,
        reference: pl.Series,
        severity: ValidationSeverity = ValidationSeverity.WARNING,
    ) -> "DataValidator":
        """Add check that every value appears in `reference`"""
        known = reference.unique()
        return self._count_check(
            f"ref_integrity_{column}",
            column,
            lambda: ~pl.col(column).is_in(known) & pl.col(column).is_not_null(),
            lambda n: f"{self.dataset}.{column} has {n} references to unknown records",
            severity,
        )

    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """
        Run all validation checks on a frame.

        Args:
            df: Frame to validate

        Returns:
            ValidationResult with all check results
        """
        checks = [check(df) for check in self._checks]

        for check in checks:
            if not check.passed:
                logger.warning(
                    "Record validation failed",
                    dataset=self.dataset,
                    check=check.name,
                    message=check.message,
                    severity=check.severity.value,
                )

        errors = sum(1 for c in checks if not c.passed and c.severity == ValidationSeverity.ERROR)
        warnings = sum(1 for c in checks if not c.passed and c.severity == ValidationSeverity.WARNING)
        if errors:
            status = ValidationStatus.FAILED
        elif warnings:
            status = ValidationStatus.PARTIAL
        else:
            status = ValidationStatus.PASSED

        return ValidationResult(dataset=self.dataset, status=status, checks=checks)


def create_orders_validator() -> DataValidator:
    """Validator for the orders frame"""
    return (
        DataValidator("orders")
        .add_not_null_check("order_id")
        .add_not_null_check("user_id")
        .add_not_null_check("ordered_at")
        .add_range_check("total_price", min_value=0)
        .add_enum_check("status", [status.value for status in OrderStatus])
    )


def create_line_items_validator(products: pl.DataFrame) -> DataValidator:
    """Validator for line items, including references into the product frame"""
    return (
        DataValidator("line_items")
        .add_not_null_check("product_id")
        .add_range_check("quantity", min_value=1)
        .add_referential_integrity_check("product_id", products["product_id"])
    )


def create_products_validator() -> DataValidator:
    """Validator for the product frame"""
    return (
        DataValidator("products")
        .add_not_null_check("product_id")
        .add_range_check("price", min_value=0)
        .add_range_check("cost", min_value=0, severity=ValidationSeverity.WARNING)
        .add_range_check("stock", min_value=0)
    )


def validate_records(frames: OrderFrames, products: pl.DataFrame) -> List[ValidationResult]:
    """Validate orders, line items and products together"""
    return [
        create_orders_validator().validate(frames.orders),
        create_line_items_validator(products).validate(frames.items),
        create_products_validator().validate(products),
    ]
