"""Typed read-only records consumed by the report builders.

Rows coming out of the database are validated into these shapes at the row
source boundary, so the aggregation code only ever sees a closed, known set of
attributes.
"""
import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from ..orders.models import OrderStatus, ShipmentStatus

StockStatus = Literal["ok", "low", "out"]


def classify_stock(quantity: float, min_stock_level: Optional[float]) -> StockStatus:
    """Out when nothing is left, low when under a positive minimum, ok otherwise."""
    minimum = min_stock_level or 0
    if quantity <= 0:
        return "out"
    if minimum > 0 and quantity < minimum:
        return "low"
    return "ok"


class _Record(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)


class OrderRecord(_Record):
    id: int
    status: OrderStatus
    total_amount: Optional[float] = None
    created_at: datetime.datetime
    store_id: int
    chain_id: int


class ShipmentRecord(_Record):
    id: int
    status: ShipmentStatus
    shipped_date: Optional[datetime.datetime] = None
    delivered_date: Optional[datetime.datetime] = None
    order_id: int


class ProductionPlanRecord(_Record):
    id: int
    chain_id: Optional[int] = None
    start_date: Optional[datetime.date] = None
    status: str


class ProductionDetailRecord(_Record):
    id: int
    plan_id: int
    item_id: int
    quantity_planned: float = 0
    quantity_produced: float = 0
    status: Optional[str] = None
    started_at: Optional[datetime.datetime] = None
    completed_at: Optional[datetime.datetime] = None


class InventoryRecord(_Record):
    id: int
    store_id: int
    item_id: int
    quantity: float
    min_stock_level: Optional[float] = None
    max_stock_level: Optional[float] = None

    @property
    def stock_status(self) -> StockStatus:
        return classify_stock(self.quantity, self.min_stock_level)


class AlertRecord(_Record):
    id: int
    store_id: int
    item_id: Optional[int] = None
    message: Optional[str] = None
    alert_type: str
    is_resolved: bool = False
