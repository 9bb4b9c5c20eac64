from __future__ import annotations

import datetime as dt
from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class DailySales(BaseModel):
    date: dt.date
    amount: Decimal
    orders: int


class SalesReport(BaseModel):
    """Daily aggregates for the selected period."""
    period: str
    date_from: date
    date_to: date
    daily: List[DailySales]
    total_amount: Decimal
    total_orders: int
    average_ticket: Decimal


class ServicePopularity(BaseModel):
    tipo: str
    item_id: Optional[UUID] = None
    nombre: str
    count: int
    revenue: Decimal


class CustomerPurchases(BaseModel):
    customer_id: UUID
    nombre: str
    documento: Optional[str] = None
    purchases: int
    total: Decimal
