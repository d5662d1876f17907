"""
Report Row Models

One typed row model per report. Monetary values are ``Decimal`` with two
places; ratios that cannot be computed are ``None``.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class CustomerType(str, Enum):
    NEW = "New"
    REPEAT = "Repeat"


class CustomerSegment(str, Enum):
    """RFM monetary segment"""
    VIP = "VIP"
    LOYAL = "Loyal"
    OCCASIONAL = "Occasional"


class CategorySales(BaseModel):
    """Completed-order sales by category"""
    category: str
    total_sales: Decimal


class MonthlySales(BaseModel):
    """Completed-order sales per calendar month"""
    month: date
    total_sales: Decimal


class ProductSales(BaseModel):
    """Completed-order units and revenue per product"""
    product_id: int
    product_name: str
    total_quantity: int
    total_revenue: Decimal


class CustomerTypeCount(BaseModel):
    customer_type: CustomerType
    customer_count: int


class CityCustomers(BaseModel):
    city: Optional[str]
    customer_count: int


class TrafficSourceConversion(BaseModel):
    """Session conversion per traffic source"""
    traffic_source: str
    total_sessions: int
    converted_sessions: int
    conversion_rate: Optional[Decimal]


class MonthlyGrowth(BaseModel):
    """Month-over-month revenue growth, ``None`` when undefined"""
    month: date
    revenue: Decimal
    growth_percent: Optional[Decimal]


class CustomerLifetimeValue(BaseModel):
    customer_id: int
    customer_name: str
    lifetime_value: Decimal


class CategoryOrderValue(BaseModel):
    """Average order value per category"""
    category: str
    total_revenue: Decimal
    order_count: int
    avg_order_value: Optional[Decimal]


class CategoryProfitMargin(BaseModel):
    category: str
    total_revenue: Decimal
    total_profit: Decimal
    profit_margin_percent: Optional[Decimal]


class CustomerRFM(BaseModel):
    """Recency, frequency and monetary value with the derived segment"""
    customer_id: int
    customer_name: str
    recency_days: int
    frequency: int
    monetary: Decimal
    segment: CustomerSegment


class CategoryMonthPerformance(BaseModel):
    month: date
    category: str
    revenue: Decimal
    order_count: int
