"""
Database Models - Source Relations

SQLAlchemy 2.0 tables the snapshot can be read from:

Dimension Tables:
- DimCustomer: customers
- DimProduct: product catalogue with price and cost

Fact Tables:
- FactOrder: order headers
- FactOrderItem: order lines
- FactWebSession: website activity sessions
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


# =============================================================================
# DIMENSION TABLES
# =============================================================================

class DimCustomer(Base):
    __tablename__ = "customers"

    customer_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    gender: Mapped[Optional[str]] = mapped_column(String(20))
    age: Mapped[Optional[int]] = mapped_column(Integer)
    city: Mapped[Optional[str]] = mapped_column(String(100))
    country: Mapped[Optional[str]] = mapped_column(String(100))
    signup_date: Mapped[Optional[date]] = mapped_column(Date)

    orders: Mapped[List["FactOrder"]] = relationship(back_populates="customer")

    __table_args__ = (
        Index("ix_customers_city", "city"),
    )


class DimProduct(Base):
    __tablename__ = "products"

    product_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    sub_category: Mapped[Optional[str]] = mapped_column(String(100))
    brand: Mapped[Optional[str]] = mapped_column(String(100))
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    __table_args__ = (
        Index("ix_products_category", "category"),
    )


# =============================================================================
# FACT TABLES
# =============================================================================

class FactOrder(Base):
    __tablename__ = "orders"

    order_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.customer_id"), nullable=False)
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    order_status: Mapped[str] = mapped_column(String(20), nullable=False)  # completed, cancelled, returned
    payment_mode: Mapped[Optional[str]] = mapped_column(String(50))

    customer: Mapped["DimCustomer"] = relationship(back_populates="orders")
    items: Mapped[List["FactOrderItem"]] = relationship(back_populates="order")

    __table_args__ = (
        Index("ix_orders_customer", "customer_id"),
        Index("ix_orders_date_status", "order_date", "order_status"),
    )


class FactOrderItem(Base):
    __tablename__ = "order_items"

    order_item_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.order_id"), nullable=False)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.product_id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    discount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    final_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    order: Mapped["FactOrder"] = relationship(back_populates="items")

    __table_args__ = (
        Index("ix_order_items_order", "order_id"),
        Index("ix_order_items_product", "product_id"),
    )


class FactWebSession(Base):
    __tablename__ = "website_activity"

    session_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.customer_id"), nullable=False)
    device_type: Mapped[Optional[str]] = mapped_column(String(50))
    traffic_source: Mapped[str] = mapped_column(String(50), nullable=False)
    session_start: Mapped[Optional[datetime]] = mapped_column(DateTime)
    pages_viewed: Mapped[int] = mapped_column(Integer, default=0)
    time_spent: Mapped[float] = mapped_column(Float, default=0.0)
    purchase_made: Mapped[str] = mapped_column(String(3), nullable=False)  # Yes / No

    __table_args__ = (
        Index("ix_website_activity_source", "traffic_source"),
    )


# Table for each snapshot relation
RELATION_TABLES = {
    "customers": DimCustomer,
    "products": DimProduct,
    "orders": FactOrder,
    "order_items": FactOrderItem,
    "website_activity": FactWebSession,
}
