"""
Report Engine

Computes the named analytical reports over a relation snapshot.

Every report is a pure function of the snapshot: relational work (joins,
filters, grouping, window shifts) runs in polars over integer-cent columns,
and the final ratios are rounded half-up with ``Decimal``.

Revenue policy:
- ``final_price`` is the realized per-unit price of an order line.
- The completed-order reports (sales by category, monthly trend, top
  products) sum ``final_price`` as-is and only count completed orders.
- Every other revenue report sums ``final_price * quantity`` over all
  orders regardless of status.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type

import polars as pl
import structlog
from pydantic import BaseModel

from ecommerce_reports.config import ReportSettings, get_settings, report_context
from ecommerce_reports.data.models import OrderStatus
from ecommerce_reports.data.snapshot import Snapshot
from .money import from_cents, percentage, ratio
from .rows import (
    CategoryMonthPerformance,
    CategoryOrderValue,
    CategoryProfitMargin,
    CategorySales,
    CityCustomers,
    CustomerLifetimeValue,
    CustomerRFM,
    CustomerSegment,
    CustomerType,
    CustomerTypeCount,
    MonthlyGrowth,
    MonthlySales,
    ProductSales,
    TrafficSourceConversion,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ReportDefinition:
    """A named report and the row model it produces"""
    name: str
    title: str
    row_model: Type[BaseModel]
    compute: Callable[[], List[BaseModel]]


@dataclass
class ReportResult:
    """Result of one report computation"""
    name: str
    title: str
    row_model: Type[BaseModel]
    rows: List[BaseModel]
    row_count: int
    started_at: datetime
    completed_at: datetime
    duration_seconds: float

    def to_dicts(self) -> List[Dict[str, Any]]:
        """Rows as plain dictionaries (enums unwrapped to their values)"""
        return [
            {k: v.value if isinstance(v, Enum) else v for k, v in row.model_dump().items()}
            for row in self.rows
        ]

    def to_frame(self) -> pl.DataFrame:
        """Rows as a polars DataFrame for downstream consumers"""
        if not self.rows:
            return pl.DataFrame(schema=list(self.row_model.model_fields))
        return pl.DataFrame(self.to_dicts())


class ReportEngine:
    """
    Reporting engine over an immutable relation snapshot.

    Reports are registered by name; each one reads the shared snapshot and
    never mutates it, so reports can run in any order or in parallel.

    Example:
        engine = ReportEngine(snapshot)
        result = engine.compute("sales_by_category")
        for row in result.rows:
            print(row.category, row.total_sales)
    """

    def __init__(
        self,
        snapshot: Snapshot,
        report_settings: Optional[ReportSettings] = None,
        reference_date: Optional[date] = None,
    ):
        self.snapshot = snapshot
        self.settings = report_settings or get_settings().reports
        # Fixed once so repeated runs on one engine agree
        self.reference_date = reference_date or self.settings.reference_date or date.today()
        self._reports: Dict[str, ReportDefinition] = {}
        self._register_default_reports()

    def _register_default_reports(self) -> None:
        """Register the report catalogue in presentation order"""
        for definition in [
            ReportDefinition("sales_by_category", "Sales by Category", CategorySales, self.sales_by_category),
            ReportDefinition("monthly_sales_trend", "Monthly Sales Trend", MonthlySales, self.monthly_sales_trend),
            ReportDefinition("top_products", "Top Products", ProductSales, self.top_products),
            ReportDefinition("new_vs_repeat_customers", "New vs Repeat Customers", CustomerTypeCount, self.new_vs_repeat_customers),
            ReportDefinition("customers_by_city", "Customers by City", CityCustomers, self.customers_by_city),
            ReportDefinition("traffic_source_conversion", "Traffic Source Conversion Rate", TrafficSourceConversion, self.traffic_source_conversion),
            ReportDefinition("monthly_sales_growth", "Monthly Sales Growth %", MonthlyGrowth, self.monthly_sales_growth),
            ReportDefinition("top_customers_by_lifetime_value", "Top Customers by Lifetime Value", CustomerLifetimeValue, self.top_customers_by_lifetime_value),
            ReportDefinition("category_average_order_value", "Category-wise Average Order Value", CategoryOrderValue, self.category_average_order_value),
            ReportDefinition("category_profit_margin", "Profit Margin by Category", CategoryProfitMargin, self.category_profit_margin),
            ReportDefinition("rfm_segmentation", "RFM Segmentation", CustomerRFM, self.rfm_segmentation),
            ReportDefinition("category_performance_over_time", "Category Performance Over Time", CategoryMonthPerformance, self.category_performance_over_time),
        ]:
            self._reports[definition.name] = definition

    def register_report(self, definition: ReportDefinition) -> None:
        """Register an additional report"""
        self._reports[definition.name] = definition

    def report_names(self) -> List[str]:
        return list(self._reports)

    # =========================================================================
    # EXECUTION
    # =========================================================================

    def compute(self, name: str) -> ReportResult:
        """
        Compute one report by name.

        Raises:
            ValueError: If no report is registered under ``name``
        """
        definition = self._reports.get(name)
        if definition is None:
            raise ValueError(f"Unknown report: {name}. Available: {self.report_names()}")

        with report_context(report=name):
            started_at = datetime.now(timezone.utc)
            rows = definition.compute()
            completed_at = datetime.now(timezone.utc)

            result = ReportResult(
                name=name,
                title=definition.title,
                row_model=definition.row_model,
                rows=rows,
                row_count=len(rows),
                started_at=started_at,
                completed_at=completed_at,
                duration_seconds=(completed_at - started_at).total_seconds(),
            )
            logger.info("Report computed", rows=result.row_count, duration_seconds=result.duration_seconds)
        return result

    def compute_all(self, max_workers: Optional[int] = None) -> Dict[str, ReportResult]:
        """
        Compute every registered report.

        Args:
            max_workers: Threads to spread reports over (default from settings);
                1 computes sequentially

        Returns:
            Results keyed by report name, in catalogue order
        """
        names = self.report_names()
        workers = max_workers or self.settings.max_workers

        logger.info("Computing all reports", reports=len(names), workers=workers)

        if workers <= 1:
            return {name: self.compute(name) for name in names}

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="report") as executor:
            futures = {name: executor.submit(self.compute, name) for name in names}
            return {name: futures[name].result() for name in names}

    # =========================================================================
    # SHARED FRAMES
    # =========================================================================

    def _order_lines(self, completed_only: bool = False) -> pl.DataFrame:
        """Order items joined to their orders, with line revenue in cents"""
        orders = self.snapshot.orders
        if completed_only:
            orders = orders.filter(pl.col("order_status") == OrderStatus.COMPLETED.value)

        return (
            self.snapshot.order_items
            .join(
                orders.select(["order_id", "customer_id", "order_date", "order_status"]),
                on="order_id",
                how="inner",
            )
            .with_columns(
                (pl.col("final_price_cents") * pl.col("quantity")).alias("line_revenue_cents"),
                pl.col("order_date").dt.truncate("1mo").alias("month"),
            )
        )

    def _with_products(self, lines: pl.DataFrame) -> pl.DataFrame:
        return lines.join(
            self.snapshot.products.select(["product_id", "product_name", "category", "cost_cents"]),
            on="product_id",
            how="inner",
        )

    def _with_customers(self, lines: pl.DataFrame) -> pl.DataFrame:
        return lines.join(
            self.snapshot.customers.select(["customer_id", "customer_name"]),
            on="customer_id",
            how="inner",
        )

    # =========================================================================
    # COMPLETED-ORDER REPORTS
    # =========================================================================

    def sales_by_category(self) -> List[CategorySales]:
        """Sum of final_price per category for completed orders, highest first"""
        totals = (
            self._with_products(self._order_lines(completed_only=True))
            .group_by("category")
            .agg(pl.col("final_price_cents").sum().alias("total_cents"))
            .sort(["total_cents", "category"], descending=[True, False])
        )
        return [
            CategorySales(category=r["category"], total_sales=from_cents(r["total_cents"]))
            for r in totals.iter_rows(named=True)
        ]

    def monthly_sales_trend(self) -> List[MonthlySales]:
        """Completed-order sales per calendar month, oldest first"""
        per_order = (
            self._order_lines(completed_only=True)
            .group_by(["order_id", "month"])
            .agg(pl.col("final_price_cents").sum().alias("order_cents"))
        )
        monthly = (
            per_order
            .group_by("month")
            .agg(pl.col("order_cents").sum().alias("total_cents"))
            .sort("month")
        )
        return [
            MonthlySales(month=r["month"], total_sales=from_cents(r["total_cents"]))
            for r in monthly.iter_rows(named=True)
        ]

    def top_products(self) -> List[ProductSales]:
        """Best-selling products of completed orders by revenue"""
        products = (
            self._with_products(self._order_lines(completed_only=True))
            .group_by(["product_id", "product_name"])
            .agg(
                pl.col("quantity").sum().alias("total_quantity"),
                pl.col("final_price_cents").sum().alias("revenue_cents"),
            )
            .sort(["revenue_cents", "product_id"], descending=[True, False])
            .head(self.settings.top_products_limit)
        )
        return [
            ProductSales(
                product_id=r["product_id"],
                product_name=r["product_name"],
                total_quantity=r["total_quantity"],
                total_revenue=from_cents(r["revenue_cents"]),
            )
            for r in products.iter_rows(named=True)
        ]

    # =========================================================================
    # CUSTOMER AND TRAFFIC REPORTS
    # =========================================================================

    def new_vs_repeat_customers(self) -> List[CustomerTypeCount]:
        """Customers with exactly one order (any status) are New, the rest Repeat"""
        counts = (
            self.snapshot.orders
            .group_by("customer_id")
            .agg(pl.col("order_id").n_unique().alias("order_count"))
            .with_columns(
                pl.when(pl.col("order_count") == 1)
                .then(pl.lit(CustomerType.NEW.value))
                .otherwise(pl.lit(CustomerType.REPEAT.value))
                .alias("customer_type")
            )
            .group_by("customer_type")
            .agg(pl.len().alias("customer_count"))
            .sort("customer_type")
        )
        return [
            CustomerTypeCount(customer_type=CustomerType(r["customer_type"]), customer_count=r["customer_count"])
            for r in counts.iter_rows(named=True)
        ]

    def customers_by_city(self) -> List[CityCustomers]:
        """Distinct ordering customers per city, largest first"""
        ordering = self.snapshot.orders.select("customer_id").unique()
        cities = (
            self.snapshot.customers
            .join(ordering, on="customer_id", how="inner")
            .group_by("city")
            .agg(pl.col("customer_id").n_unique().alias("customer_count"))
            .sort(["customer_count", "city"], descending=[True, False], nulls_last=True)
        )
        return [
            CityCustomers(city=r["city"], customer_count=r["customer_count"])
            for r in cities.iter_rows(named=True)
        ]

    def traffic_source_conversion(self) -> List[TrafficSourceConversion]:
        """Percentage of sessions with a purchase, per traffic source"""
        sources = (
            self.snapshot.website_activity
            .with_columns(
                (pl.col("purchase_made").str.to_lowercase() == "yes").alias("converted")
            )
            .group_by("traffic_source")
            .agg(
                pl.len().alias("total_sessions"),
                pl.col("converted").sum().alias("converted_sessions"),
            )
        )
        rows = [
            TrafficSourceConversion(
                traffic_source=r["traffic_source"],
                total_sessions=r["total_sessions"],
                converted_sessions=r["converted_sessions"],
                conversion_rate=percentage(r["converted_sessions"], r["total_sessions"]),
            )
            for r in sources.iter_rows(named=True)
        ]
        return sorted(rows, key=lambda r: _descending(r.conversion_rate) + (r.traffic_source,))

    # =========================================================================
    # ALL-ORDER REVENUE REPORTS
    # =========================================================================

    def monthly_sales_growth(self) -> List[MonthlyGrowth]:
        """Monthly revenue with growth against the previous month present in the data"""
        monthly = (
            self._order_lines()
            .group_by("month")
            .agg(pl.col("line_revenue_cents").sum().alias("revenue_cents"))
            .sort("month")
            .with_columns(pl.col("revenue_cents").shift(1).alias("previous_cents"))
        )
        rows = []
        for r in monthly.iter_rows(named=True):
            previous = r["previous_cents"]
            growth = None
            if previous is not None:
                growth = percentage(r["revenue_cents"] - previous, previous)
            rows.append(
                MonthlyGrowth(month=r["month"], revenue=from_cents(r["revenue_cents"]), growth_percent=growth)
            )
        return rows

    def top_customers_by_lifetime_value(self) -> List[CustomerLifetimeValue]:
        customers = (
            self._with_customers(self._order_lines())
            .group_by(["customer_id", "customer_name"])
            .agg(pl.col("line_revenue_cents").sum().alias("value_cents"))
            .sort(["value_cents", "customer_id"], descending=[True, False])
            .head(self.settings.top_customers_limit)
        )
        return [
            CustomerLifetimeValue(
                customer_id=r["customer_id"],
                customer_name=r["customer_name"],
                lifetime_value=from_cents(r["value_cents"]),
            )
            for r in customers.iter_rows(named=True)
        ]

    def category_average_order_value(self) -> List[CategoryOrderValue]:
        """Revenue per distinct order touching each category"""
        categories = (
            self._with_products(self._order_lines())
            .group_by("category")
            .agg(
                pl.col("line_revenue_cents").sum().alias("revenue_cents"),
                pl.col("order_id").n_unique().alias("order_count"),
            )
        )
        rows = []
        for r in categories.iter_rows(named=True):
            revenue = from_cents(r["revenue_cents"])
            rows.append(
                CategoryOrderValue(
                    category=r["category"],
                    total_revenue=revenue,
                    order_count=r["order_count"],
                    avg_order_value=ratio(revenue, r["order_count"]),
                )
            )
        return sorted(rows, key=lambda r: _descending(r.avg_order_value) + (r.category,))

    def category_profit_margin(self) -> List[CategoryProfitMargin]:
        """Profit and margin per category, cost taken from the product catalogue"""
        categories = (
            self._with_products(self._order_lines())
            .with_columns(
                ((pl.col("final_price_cents") - pl.col("cost_cents")) * pl.col("quantity"))
                .alias("profit_cents")
            )
            .group_by("category")
            .agg(
                pl.col("line_revenue_cents").sum().alias("revenue_cents"),
                pl.col("profit_cents").sum().alias("profit_cents"),
            )
        )
        rows = [
            CategoryProfitMargin(
                category=r["category"],
                total_revenue=from_cents(r["revenue_cents"]),
                total_profit=from_cents(r["profit_cents"]),
                profit_margin_percent=percentage(r["profit_cents"], r["revenue_cents"]),
            )
            for r in categories.iter_rows(named=True)
        ]
        return sorted(rows, key=lambda r: _descending(r.profit_margin_percent) + (r.category,))

    def rfm_segmentation(self) -> List[CustomerRFM]:
        """
        Recency, frequency and monetary value per customer.

        Segments: VIP above the VIP threshold, Loyal between the loyal and VIP
        thresholds inclusive, Occasional below.
        """
        customers = (
            self._with_customers(self._order_lines())
            .group_by(["customer_id", "customer_name"])
            .agg(
                pl.col("order_date").max().alias("last_order_date"),
                pl.col("order_id").n_unique().alias("frequency"),
                pl.col("line_revenue_cents").sum().alias("monetary_cents"),
            )
            .sort(["monetary_cents", "customer_id"], descending=[True, False])
        )
        return [
            CustomerRFM(
                customer_id=r["customer_id"],
                customer_name=r["customer_name"],
                recency_days=(self.reference_date - r["last_order_date"]).days,
                frequency=r["frequency"],
                monetary=from_cents(r["monetary_cents"]),
                segment=self.segment_for(from_cents(r["monetary_cents"])),
            )
            for r in customers.iter_rows(named=True)
        ]

    def segment_for(self, monetary: Decimal) -> CustomerSegment:
        if monetary > self.settings.vip_threshold:
            return CustomerSegment.VIP
        if monetary >= self.settings.loyal_threshold:
            return CustomerSegment.LOYAL
        return CustomerSegment.OCCASIONAL

    def category_performance_over_time(self) -> List[CategoryMonthPerformance]:
        cells = (
            self._with_products(self._order_lines())
            .group_by(["month", "category"])
            .agg(
                pl.col("line_revenue_cents").sum().alias("revenue_cents"),
                pl.col("order_id").n_unique().alias("order_count"),
            )
            .sort(["month", "category"])
        )
        return [
            CategoryMonthPerformance(
                month=r["month"],
                category=r["category"],
                revenue=from_cents(r["revenue_cents"]),
                order_count=r["order_count"],
            )
            for r in cells.iter_rows(named=True)
        ]


def _descending(value: Optional[Decimal]) -> tuple:
    """Sort key placing larger values first and undefined values last"""
    if value is None:
        return (1, Decimal(0))
    return (0, -value)
