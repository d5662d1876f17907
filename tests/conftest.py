"""
Test Suite Configuration
"""
from datetime import date
from decimal import Decimal

import pytest

from ecommerce_reports.config import ReportSettings, Settings
from ecommerce_reports.data import Snapshot
from ecommerce_reports.reporting import ReportEngine


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
    )


@pytest.fixture
def report_settings() -> ReportSettings:
    return ReportSettings(reference_date=date(2024, 4, 1))


@pytest.fixture
def customer_records() -> list:
    return [
        {"customer_id": 1, "customer_name": "Asha", "gender": "F", "age": 30, "city": "Mumbai", "country": "India", "signup_date": "2023-06-01"},
        {"customer_id": 2, "customer_name": "Ben", "gender": "M", "age": 45, "city": "Pune", "country": "India", "signup_date": "2023-07-15"},
        {"customer_id": 3, "customer_name": "Chen", "gender": "M", "age": 28, "city": "Mumbai", "country": "India", "signup_date": "2023-09-30"},
        {"customer_id": 4, "customer_name": "Dana", "gender": "F", "age": 35, "city": "Delhi", "country": "India", "signup_date": "2024-01-02"},
    ]


@pytest.fixture
def product_records() -> list:
    return [
        {"product_id": 10, "product_name": "Running Shoe", "category": "Footwear", "sub_category": "Sports", "brand": "Stride", "price": "100.00", "cost": "60.00"},
        {"product_id": 11, "product_name": "Sandal", "category": "Footwear", "sub_category": "Casual", "brand": "Stride", "price": "50.00", "cost": "20.00"},
        {"product_id": 20, "product_name": "Phone", "category": "Electronics", "sub_category": "Mobile", "brand": "Volt", "price": "500.00", "cost": "400.00"},
        {"product_id": 30, "product_name": "T-Shirt", "category": "Apparel", "sub_category": "Tops", "brand": "Loom", "price": "20.00", "cost": "12.50"},
    ]


@pytest.fixture
def order_records() -> list:
    return [
        {"order_id": 100, "customer_id": 1, "order_date": "2024-01-10", "order_status": "completed", "payment_mode": "UPI"},
        {"order_id": 101, "customer_id": 1, "order_date": "2024-02-05", "order_status": "completed", "payment_mode": "Card"},
        {"order_id": 102, "customer_id": 2, "order_date": "2024-01-20", "order_status": "cancelled", "payment_mode": "Card"},
        {"order_id": 103, "customer_id": 3, "order_date": "2024-02-15", "order_status": "completed", "payment_mode": "COD"},
        {"order_id": 104, "customer_id": 2, "order_date": "2024-03-01", "order_status": "returned", "payment_mode": "UPI"},
    ]


@pytest.fixture
def order_item_records() -> list:
    # final_price is the per-unit realized price
    return [
        {"order_item_id": 1, "order_id": 100, "product_id": 10, "quantity": 2, "discount": "10.00", "final_price": "90.00"},
        {"order_item_id": 2, "order_id": 100, "product_id": 30, "quantity": 1, "discount": "0", "final_price": "20.00"},
        {"order_item_id": 3, "order_id": 101, "product_id": 20, "quantity": 1, "discount": "20.00", "final_price": "480.00"},
        {"order_item_id": 4, "order_id": 102, "product_id": 11, "quantity": 3, "discount": "5.00", "final_price": "45.00"},
        {"order_item_id": 5, "order_id": 103, "product_id": 10, "quantity": 1, "discount": "4.50", "final_price": "95.50"},
        {"order_item_id": 6, "order_id": 103, "product_id": 30, "quantity": 4, "discount": "1.75", "final_price": "18.25"},
        {"order_item_id": 7, "order_id": 104, "product_id": 20, "quantity": 1, "discount": "0", "final_price": "500.00"},
    ]


@pytest.fixture
def session_records() -> list:
    return [
        {"session_id": 1, "customer_id": 1, "device_type": "Mobile", "traffic_source": "Google", "session_start": "2024-01-09 10:00:00", "pages_viewed": 5, "time_spent": 12.5, "purchase_made": "Yes"},
        {"session_id": 2, "customer_id": 2, "device_type": "Desktop", "traffic_source": "Google", "session_start": "2024-01-19 11:30:00", "pages_viewed": 3, "time_spent": 4.0, "purchase_made": "no"},
        {"session_id": 3, "customer_id": 3, "device_type": "Mobile", "traffic_source": "Google", "session_start": "2024-02-14 09:15:00", "pages_viewed": 8, "time_spent": 20.0, "purchase_made": "yes"},
        {"session_id": 4, "customer_id": 1, "device_type": "Tablet", "traffic_source": "Facebook", "session_start": "2024-02-01 18:45:00", "pages_viewed": 2, "time_spent": 1.5, "purchase_made": "No"},
        {"session_id": 5, "customer_id": 4, "device_type": "Desktop", "traffic_source": "Direct", "session_start": "2024-02-20 08:00:00", "pages_viewed": 1, "time_spent": 0.5, "purchase_made": "No"},
        {"session_id": 6, "customer_id": 2, "device_type": "Mobile", "traffic_source": "Facebook", "session_start": "2024-02-28 21:10:00", "pages_viewed": 6, "time_spent": 9.0, "purchase_made": "YES"},
    ]


@pytest.fixture
def sample_snapshot(
    customer_records,
    product_records,
    order_records,
    order_item_records,
    session_records,
) -> Snapshot:
    """Four customers, four products, five orders across three months"""
    return Snapshot.from_records(
        customers=customer_records,
        products=product_records,
        orders=order_records,
        order_items=order_item_records,
        website_activity=session_records,
    )


@pytest.fixture
def engine(sample_snapshot, report_settings) -> ReportEngine:
    return ReportEngine(sample_snapshot, report_settings=report_settings)


def build_snapshot(lines, customers=None, statuses=None, products=None) -> Snapshot:
    """
    Small snapshot from (order_id, customer_id, order_date, product_id, quantity, final_price) tuples.

    Products default to one "Footwear" product (id 1, cost 0) unless given.
    """
    customers = customers or [{"customer_id": 1, "customer_name": "C1"}]
    products = products or [
        {"product_id": 1, "product_name": "Shoe", "category": "Footwear", "price": "0", "cost": "0"},
    ]
    statuses = statuses or {}

    orders = {}
    items = []
    for order_id, customer_id, order_date, product_id, quantity, final_price in lines:
        orders[order_id] = {
            "order_id": order_id,
            "customer_id": customer_id,
            "order_date": order_date,
            "order_status": statuses.get(order_id, "completed"),
        }
        items.append({
            "order_id": order_id,
            "product_id": product_id,
            "quantity": quantity,
            "final_price": Decimal(str(final_price)),
        })

    return Snapshot.from_records(
        customers=customers,
        products=products,
        orders=list(orders.values()),
        order_items=items,
    )


@pytest.fixture
def snapshot_factory():
    """Factory building small single-purpose snapshots"""
    return build_snapshot
