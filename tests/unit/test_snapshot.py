"""
Unit Tests - Snapshot Parsing
"""
from datetime import date
from decimal import Decimal

import polars as pl
import pytest

from ecommerce_reports.data import OrderItem, OrderStatus, Snapshot, SnapshotValidationError
from ecommerce_reports.data.models import Order, WebSession, to_cents


class TestEntityModels:
    """Tests for row-level parsing"""

    def test_status_is_case_insensitive(self):
        order = Order.model_validate(
            {"order_id": 1, "customer_id": 1, "order_date": "2024-01-05", "order_status": " Completed "}
        )

        assert order.order_status == OrderStatus.COMPLETED

    def test_unknown_status_rejected(self):
        with pytest.raises(ValueError):
            Order.model_validate(
                {"order_id": 1, "customer_id": 1, "order_date": "2024-01-05", "order_status": "shipped"}
            )

    def test_datetime_order_date_truncated(self):
        order = Order.model_validate(
            {"order_id": 1, "customer_id": 1, "order_date": "2024-01-05 17:30:00", "order_status": "returned"}
        )

        assert order.order_date == date(2024, 1, 5)

    def test_purchase_flag(self):
        session = WebSession.model_validate(
            {"session_id": 1, "customer_id": 1, "traffic_source": "Email", "purchase_made": "YES"}
        )

        assert session.converted
        assert session.purchase_made == "YES"

    def test_purchase_flag_rejects_other_values(self):
        with pytest.raises(ValueError):
            WebSession.model_validate(
                {"session_id": 1, "customer_id": 1, "traffic_source": "Email", "purchase_made": "maybe"}
            )

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValueError):
            OrderItem.model_validate({"order_id": 1, "product_id": 1, "quantity": -1, "final_price": "5"})

    def test_blank_discount_defaults_to_zero(self):
        item = OrderItem.model_validate(
            {"order_id": 1, "product_id": 1, "quantity": 1, "discount": "", "final_price": "5"}
        )

        assert item.discount == Decimal("0")

    @pytest.mark.parametrize(
        "amount, cents",
        [("12.50", 1250), ("0.005", 1), ("10.004", 1000), ("7", 700)],
    )
    def test_to_cents(self, amount, cents):
        assert to_cents(Decimal(amount)) == cents


class TestSnapshot:
    """Tests for snapshot construction"""

    def test_row_counts(self, sample_snapshot):
        assert sample_snapshot.row_counts == {
            "customers": 4,
            "products": 4,
            "orders": 5,
            "order_items": 7,
            "website_activity": 6,
        }

    def test_money_held_in_cents(self, sample_snapshot):
        prices = sample_snapshot.order_items.sort("order_item_id")["final_price_cents"].to_list()

        assert prices == [9000, 2000, 48000, 4500, 9550, 1825, 50000]
        assert sample_snapshot.products.schema["cost_cents"] == pl.Int64

    def test_statuses_normalized(self, sample_snapshot):
        assert set(sample_snapshot.orders["order_status"].to_list()) == {"completed", "cancelled", "returned"}

    def test_order_item_ids_assigned(self):
        snapshot = Snapshot.from_records(
            order_items=[
                {"order_item_id": 7, "order_id": 1, "product_id": 1, "quantity": 1, "final_price": "1"},
                {"order_id": 1, "product_id": 2, "quantity": 1, "final_price": "2"},
                {"order_id": 2, "product_id": 1, "quantity": 3, "final_price": "1"},
            ],
        )

        assert snapshot.order_items["order_item_id"].to_list() == [7, 8, 9]

    def test_accepts_entity_models(self):
        item = OrderItem(order_item_id=1, order_id=1, product_id=1, quantity=2, final_price=Decimal("3.10"))

        snapshot = Snapshot.from_records(order_items=[item])

        assert snapshot.order_items["final_price_cents"].to_list() == [310]

    def test_empty_relations_keep_schema(self):
        snapshot = Snapshot.from_records()

        assert snapshot.website_activity.height == 0
        assert "purchase_made" in snapshot.website_activity.columns

    def test_bad_row_names_relation_and_row(self, order_records):
        order_records[2]["order_date"] = "not a date"

        with pytest.raises(SnapshotValidationError) as exc_info:
            Snapshot.from_records(orders=order_records)

        assert exc_info.value.relation == "orders"
        assert exc_info.value.errors[0].startswith("row 2: order_date")

    def test_missing_column_rejected_before_parsing(self):
        frames = {
            "customers": pl.DataFrame({"customer_id": ["1"]}),
            "products": pl.DataFrame(),
            "orders": pl.DataFrame(),
            "order_items": pl.DataFrame(),
            "website_activity": pl.DataFrame(),
        }

        with pytest.raises(SnapshotValidationError, match="customer_name"):
            Snapshot.from_frames(frames)

    def test_missing_relation_rejected(self):
        with pytest.raises(SnapshotValidationError, match="relation not supplied"):
            Snapshot.from_frames({})

    def test_frames_require_snapshot_layout(self):
        with pytest.raises(SnapshotValidationError):
            Snapshot(
                customers=pl.DataFrame({"customer_id": [1]}),
                products=pl.DataFrame(),
                orders=pl.DataFrame(),
                order_items=pl.DataFrame(),
                website_activity=pl.DataFrame(),
            )
