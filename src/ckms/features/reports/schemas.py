"""Report query and response schemas.

Responses are serialized with camelCase keys (``totalOrders``, ``byStatus``,
``avgDeliveryHours``...) because the dashboard consumes them as-is. Python code
works with the snake_case attribute names.

1. Dashboard overview
2. Orders report (summary + per-bucket series)
3. Production report (summary + per-bucket series + per-item totals)
4. Inventory report (summary + item list + open alerts)
5. Delivery report (summary + per-bucket series)
"""
import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .grouping import Granularity
from .records import StockStatus

ReportType = Literal["orders", "production", "inventory", "delivery"]
ExportFormat = Literal["csv", "pdf"]


class ReportQuery(BaseModel):
    date_from: Optional[datetime.date] = Field(None, description="Start date (YYYY-MM-DD), inclusive")
    date_to: Optional[datetime.date] = Field(None, description="End date (YYYY-MM-DD), inclusive")
    store_id: Optional[int] = Field(None, gt=0, description="Filter by store ID")
    group_by: Granularity = Field("day", description="Series bucket size")
    # Filled from the caller's token, never from query parameters
    chain_id: Optional[int] = Field(None, description="Chain (tenant) scope")

    @model_validator(mode="after")
    def check_date_range(self) -> "ReportQuery":
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("dateFrom must not be after dateTo")
        return self


class ExportQuery(ReportQuery):
    type: ReportType = Field("orders", description="Report to export")
    format: ExportFormat = Field("csv", description="Export format")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# 1. Dashboard overview
class DashboardOverview(CamelModel):
    total_orders: int
    pending_orders: int
    completed_orders: int
    total_revenue: float
    low_stock_items: int
    pending_deliveries: int


# 2. Orders
class OrdersSummary(CamelModel):
    total: int
    completed: int
    cancelled: int
    revenue: float


class OrdersSeriesPoint(CamelModel):
    date: str
    total: int
    completed: int
    revenue: float
    by_status: Dict[str, int] = Field(default_factory=dict)


class OrdersReport(CamelModel):
    summary: OrdersSummary
    series: List[OrdersSeriesPoint]


# 3. Production
class ProductionSummary(CamelModel):
    total_planned: float
    total_produced: float
    plans_completed: int


class ProductionSeriesPoint(CamelModel):
    date: str
    planned: float
    produced: float
    batches: int


class ProductionItemTotal(CamelModel):
    product_id: int
    product_name: str
    planned: float
    produced: float


class ProductionReport(CamelModel):
    summary: ProductionSummary
    series: List[ProductionSeriesPoint]
    items: List[ProductionItemTotal] = Field(default_factory=list)


# 4. Inventory
class InventorySummary(CamelModel):
    total_items: int
    low_stock_count: int
    out_of_stock_count: int


class InventoryItemRow(CamelModel):
    item_id: int
    item_name: str
    store_id: int
    store_name: Optional[str] = None
    quantity: float
    min_stock_level: float
    status: StockStatus


class InventoryAlert(CamelModel):
    id: int
    message: str
    alert_type: str
    store_id: int


class InventoryReport(CamelModel):
    summary: InventorySummary
    items: List[InventoryItemRow]
    alerts: List[InventoryAlert] = Field(default_factory=list)


# 5. Delivery
class DeliverySummary(CamelModel):
    total: int
    delivered: int
    failed: int
    success_rate: float


class DeliverySeriesPoint(CamelModel):
    date: str
    total: int
    delivered: int
    failed: int
    avg_delivery_hours: Optional[float] = None


class DeliveryReport(CamelModel):
    summary: DeliverySummary
    series: List[DeliverySeriesPoint]
