"""
Relation Snapshot

Immutable, schema-checked view of the five source relations. A snapshot is
built once per run from any source (files, database, in-memory records) and
is then shared read-only by every report.

Monetary columns are held as integer cents (``price_cents``, ``cost_cents``,
``final_price_cents``) so that sums and products stay exact.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Type, Union

import polars as pl
import structlog
from pydantic import ValidationError

from .models import Customer, Entity, Order, OrderItem, Product, WebSession, to_cents

logger = structlog.get_logger(__name__)


class SnapshotValidationError(ValueError):
    """A source relation is structurally unusable (missing columns, bad values)"""

    def __init__(self, relation: str, errors: List[str]):
        self.relation = relation
        self.errors = errors
        super().__init__(f"Relation '{relation}' is malformed: {'; '.join(errors)}")


@dataclass(frozen=True)
class RelationSpec:
    """How one source relation is parsed and laid out in the snapshot"""
    name: str
    model: Type[Entity]
    schema: Dict[str, Any]
    money_columns: Tuple[str, ...] = ()

    @property
    def required_columns(self) -> List[str]:
        return [name for name, field in self.model.model_fields.items() if field.is_required()]

    @property
    def source_columns(self) -> List[str]:
        return list(self.model.model_fields)


CUSTOMERS = RelationSpec(
    name="customers",
    model=Customer,
    schema={
        "customer_id": pl.Int64,
        "customer_name": pl.Utf8,
        "gender": pl.Utf8,
        "age": pl.Int64,
        "city": pl.Utf8,
        "country": pl.Utf8,
        "signup_date": pl.Date,
    },
)

PRODUCTS = RelationSpec(
    name="products",
    model=Product,
    schema={
        "product_id": pl.Int64,
        "product_name": pl.Utf8,
        "category": pl.Utf8,
        "sub_category": pl.Utf8,
        "brand": pl.Utf8,
        "price_cents": pl.Int64,
        "cost_cents": pl.Int64,
    },
    money_columns=("price", "cost"),
)

ORDERS = RelationSpec(
    name="orders",
    model=Order,
    schema={
        "order_id": pl.Int64,
        "customer_id": pl.Int64,
        "order_date": pl.Date,
        "order_status": pl.Utf8,
        "payment_mode": pl.Utf8,
    },
)

ORDER_ITEMS = RelationSpec(
    name="order_items",
    model=OrderItem,
    schema={
        "order_item_id": pl.Int64,
        "order_id": pl.Int64,
        "product_id": pl.Int64,
        "quantity": pl.Int64,
        "discount": pl.Float64,
        "final_price_cents": pl.Int64,
    },
    money_columns=("final_price",),
)

WEBSITE_ACTIVITY = RelationSpec(
    name="website_activity",
    model=WebSession,
    schema={
        "session_id": pl.Int64,
        "customer_id": pl.Int64,
        "device_type": pl.Utf8,
        "traffic_source": pl.Utf8,
        "session_start": pl.Datetime("us"),
        "pages_viewed": pl.Int64,
        "time_spent": pl.Float64,
        "purchase_made": pl.Utf8,
    },
)

RELATIONS: Tuple[RelationSpec, ...] = (CUSTOMERS, PRODUCTS, ORDERS, ORDER_ITEMS, WEBSITE_ACTIVITY)

RecordSource = Iterable[Union[Mapping[str, Any], Entity]]


def _check_columns(spec: RelationSpec, columns: Sequence[str]) -> None:
    missing = [c for c in spec.required_columns if c not in columns]
    if missing:
        raise SnapshotValidationError(spec.name, [f"missing column(s): {', '.join(missing)}"])


def _parse_rows(spec: RelationSpec, rows: RecordSource) -> List[Entity]:
    """Validate every row through the relation's model"""
    parsed = []
    for index, row in enumerate(rows):
        if isinstance(row, spec.model):
            parsed.append(row)
            continue
        if isinstance(row, Entity):
            row = row.model_dump()
        try:
            parsed.append(spec.model.model_validate(row))
        except ValidationError as e:
            details = [
                f"row {index}: {'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]
            raise SnapshotValidationError(spec.name, details) from e
    return parsed


def _assign_item_ids(items: List[OrderItem]) -> List[OrderItem]:
    """Give order items without an id the next free sequential id"""
    next_id = max((i.order_item_id for i in items if i.order_item_id is not None), default=0) + 1
    assigned = []
    for item in items:
        if item.order_item_id is None:
            item = item.model_copy(update={"order_item_id": next_id})
            next_id += 1
        assigned.append(item)
    return assigned


def _to_frame(spec: RelationSpec, entities: List[Entity]) -> pl.DataFrame:
    rows = []
    for entity in entities:
        row = entity.model_dump()
        for column in spec.money_columns:
            row[f"{column}_cents"] = to_cents(row.pop(column))
        for key, value in row.items():
            if isinstance(value, Enum):
                row[key] = value.value
            elif isinstance(value, Decimal):
                row[key] = float(value)
        rows.append(row)

    if not rows:
        return pl.DataFrame(schema=spec.schema)
    return pl.from_dicts(rows, schema=spec.schema)


def build_relation(spec: RelationSpec, rows: RecordSource, columns: Optional[Sequence[str]] = None) -> pl.DataFrame:
    """
    Parse one relation into its snapshot frame.

    Args:
        spec: Relation layout
        rows: Mappings or entity models
        columns: Source column names, checked before any row is parsed

    Raises:
        SnapshotValidationError: On missing columns or an unparseable row
    """
    if columns is not None:
        _check_columns(spec, columns)

    entities = _parse_rows(spec, rows)
    if spec is ORDER_ITEMS:
        entities = _assign_item_ids(entities)
    return _to_frame(spec, entities)


@dataclass(frozen=True, eq=False)
class Snapshot:
    """
    Read-only snapshot of the five source relations.

    Example:
        snapshot = Snapshot.from_records(
            customers=[{"customer_id": 1, "customer_name": "Asha", ...}],
            products=[...], orders=[...], order_items=[...], website_activity=[...],
        )
    """
    customers: pl.DataFrame
    products: pl.DataFrame
    orders: pl.DataFrame
    order_items: pl.DataFrame
    website_activity: pl.DataFrame

    def __post_init__(self) -> None:
        for spec in RELATIONS:
            frame = getattr(self, spec.name)
            missing = [c for c in spec.schema if c not in frame.columns]
            if missing:
                raise SnapshotValidationError(spec.name, [f"missing column(s): {', '.join(missing)}"])

    @classmethod
    def from_records(
        cls,
        customers: RecordSource = (),
        products: RecordSource = (),
        orders: RecordSource = (),
        order_items: RecordSource = (),
        website_activity: RecordSource = (),
    ) -> "Snapshot":
        """Build a snapshot from mappings or entity models"""
        sources = {
            "customers": customers,
            "products": products,
            "orders": orders,
            "order_items": order_items,
            "website_activity": website_activity,
        }
        frames = {spec.name: build_relation(spec, sources[spec.name]) for spec in RELATIONS}
        snapshot = cls(**frames)
        logger.info("Snapshot built from records", **snapshot.row_counts)
        return snapshot

    @classmethod
    def from_frames(cls, frames: Mapping[str, pl.DataFrame]) -> "Snapshot":
        """
        Build a snapshot from raw source DataFrames (one per relation).

        Every relation is checked for its required columns before any row is
        parsed, so a structural problem anywhere fails the whole load.
        """
        for spec in RELATIONS:
            if spec.name not in frames:
                raise SnapshotValidationError(spec.name, ["relation not supplied"])
            _check_columns(spec, frames[spec.name].columns)

        parsed = {
            spec.name: build_relation(spec, frames[spec.name].iter_rows(named=True))
            for spec in RELATIONS
        }
        snapshot = cls(**parsed)
        logger.info("Snapshot built from frames", **snapshot.row_counts)
        return snapshot

    @property
    def row_counts(self) -> Dict[str, int]:
        return {spec.name: getattr(self, spec.name).height for spec in RELATIONS}
