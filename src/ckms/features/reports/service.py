"""
Reports Service Module

Builds the CKMS dashboard reports: overview, orders, production, inventory and
delivery analytics, plus their CSV exports. Rows are read through a
``RowSource``, bucketed by day/week/month and reduced in memory.
"""

import asyncio
import datetime
import logging
from collections import Counter
from decimal import ROUND_HALF_UP, Decimal
from typing import Awaitable, Dict, List, Optional, TypeVar

from fastapi import HTTPException, status

from ..orders.models import OrderStatus, ShipmentStatus
from .export import CSV_COLUMNS, ExportedReport, export_filename, render_csv
from .grouping import group_by_date
from .records import OrderRecord, ProductionDetailRecord, ShipmentRecord
from .row_source import RowSource, RowSourceError
from .schemas import (
    DashboardOverview, DeliveryReport, DeliverySeriesPoint, DeliverySummary,
    ExportQuery, InventoryAlert, InventoryItemRow, InventoryReport,
    InventorySummary, OrdersReport, OrdersSeriesPoint, OrdersSummary,
    ProductionItemTotal, ProductionReport, ProductionSeriesPoint,
    ProductionSummary, ReportQuery,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Orders waiting on the central kitchen to confirm them
PENDING_ORDER_STATUSES = (OrderStatus.SUBMITTED,)
STOCK_ALERT_TYPES = ("low_stock", "out_of_stock")
CLOSED_SHIPMENT_STATUSES = (ShipmentStatus.DELIVERED, ShipmentStatus.FAILED)


def round_half_up(value: float, digits: int = 1) -> float:
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _revenue(orders: List[OrderRecord]) -> float:
    return sum(order.total_amount or 0 for order in orders)


def _booked_revenue(orders: List[OrderRecord]) -> float:
    """Revenue of orders that were not cancelled."""
    return _revenue([o for o in orders if o.status != OrderStatus.CANCELLED])


def _delivery_hours(shipment: ShipmentRecord) -> float:
    elapsed = shipment.delivered_date - shipment.shipped_date
    return elapsed.total_seconds() / 3600


def _avg_delivery_hours(shipments: List[ShipmentRecord]) -> Optional[float]:
    timed = [
        s for s in shipments
        if s.status == ShipmentStatus.DELIVERED and s.shipped_date and s.delivered_date
    ]
    if not timed:
        return None
    return round_half_up(sum(_delivery_hours(s) for s in timed) / len(timed))


class ReportsService:
    """Report builders over an injected row source."""

    def __init__(self, rows: RowSource):
        self.rows = rows

    async def _fetch(self, context: str, pending: Awaitable[T]) -> T:
        try:
            return await pending
        except RowSourceError as exc:
            logger.error("Report query failed (%s): %s", context, exc.context, exc_info=exc)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Report error: {context}",
            ) from exc

    async def get_overview(self, chain_id: Optional[int] = None) -> DashboardOverview:
        """
        Real-time dashboard counters for a chain.

        The three reads are independent and run concurrently; any failure
        aborts the whole overview.
        """
        orders, alerts, shipments = await asyncio.gather(
            self._fetch("fetch orders", self.rows.fetch_orders(chain_id=chain_id)),
            self._fetch(
                "fetch alerts",
                self.rows.fetch_stock_alerts(chain_id=chain_id, alert_types=STOCK_ALERT_TYPES),
            ),
            self._fetch(
                "fetch shipments",
                self.rows.fetch_shipments(chain_id=chain_id, exclude_statuses=CLOSED_SHIPMENT_STATUSES),
            ),
        )
        return DashboardOverview(
            total_orders=len(orders),
            pending_orders=sum(1 for o in orders if o.status in PENDING_ORDER_STATUSES),
            completed_orders=sum(1 for o in orders if o.status == OrderStatus.DELIVERED),
            total_revenue=_revenue(orders),
            low_stock_items=len(alerts),
            pending_deliveries=len(shipments),
        )

    async def get_orders_report(self, query: ReportQuery) -> OrdersReport:
        """
        Orders analytics: one series point per date bucket plus a summary.

        Args:
            query: date range, store and bucket size. Revenue leaves out
                cancelled orders and treats orders without a total as zero.

        Returns:
            OrdersReport with per-bucket totals, delivered counts, revenue and
            a status histogram.
        """
        orders = await self._fetch(
            "fetch orders report",
            self.rows.fetch_orders(
                chain_id=query.chain_id, store_id=query.store_id,
                date_from=query.date_from, date_to=query.date_to,
            ),
        )

        def reduce(key: str, group: List[OrderRecord]) -> OrdersSeriesPoint:
            return OrdersSeriesPoint(
                date=key,
                total=len(group),
                completed=sum(1 for o in group if o.status == OrderStatus.DELIVERED),
                revenue=_booked_revenue(group),
                by_status=dict(Counter(o.status.value for o in group)),
            )

        series = group_by_date(orders, query.group_by, lambda o: o.created_at, reduce)
        summary = OrdersSummary(
            total=len(orders),
            completed=sum(1 for o in orders if o.status == OrderStatus.DELIVERED),
            cancelled=sum(1 for o in orders if o.status == OrderStatus.CANCELLED),
            revenue=_booked_revenue(orders),
        )
        return OrdersReport(summary=summary, series=series)

    async def get_production_report(self, query: ReportQuery) -> ProductionReport:
        """
        Production analytics: planned vs produced quantities per date bucket.

        A detail row is dated by its plan's start date, or failing that by the
        day it was started. Rows with neither, or outside the requested range,
        are left out.
        """
        plans = await self._fetch(
            "fetch production plans", self.rows.fetch_production_plans(chain_id=query.chain_id)
        )
        details = await self._fetch(
            "fetch production details",
            self.rows.fetch_production_details([p.id for p in plans]),
        )
        item_ids = sorted({d.item_id for d in details})
        item_names: Dict[int, str] = {}
        if item_ids:
            item_names = await self._fetch("fetch items", self.rows.fetch_item_names(item_ids))

        plan_dates = {p.id: p.start_date for p in plans}

        def production_date(detail: ProductionDetailRecord) -> Optional[datetime.date]:
            start_date = plan_dates.get(detail.plan_id)
            if start_date:
                return start_date
            if detail.started_at:
                started = detail.started_at
                if started.tzinfo is not None:
                    started = started.astimezone(datetime.timezone.utc)
                return started.date()
            return None

        def in_range(day: datetime.date) -> bool:
            if query.date_from and day < query.date_from:
                return False
            if query.date_to and day > query.date_to:
                return False
            return True

        dated = [(d, production_date(d)) for d in details]
        rows = [(d, day) for d, day in dated if day and in_range(day)]

        series = group_by_date(
            rows,
            query.group_by,
            lambda row: row[1],
            lambda key, group: ProductionSeriesPoint(
                date=key,
                planned=sum(d.quantity_planned for d, _ in group),
                produced=sum(d.quantity_produced for d, _ in group),
                batches=len(group),
            ),
        )

        per_item: Dict[int, ProductionItemTotal] = {}
        for detail, _ in rows:
            total = per_item.setdefault(
                detail.item_id,
                ProductionItemTotal(
                    product_id=detail.item_id,
                    product_name=item_names.get(detail.item_id, f"Item {detail.item_id}"),
                    planned=0,
                    produced=0,
                ),
            )
            total.planned += detail.quantity_planned
            total.produced += detail.quantity_produced

        summary = ProductionSummary(
            total_planned=sum(d.quantity_planned for d, _ in rows),
            total_produced=sum(d.quantity_produced for d, _ in rows),
            plans_completed=sum(1 for p in plans if p.status == "completed"),
        )
        return ProductionReport(
            summary=summary,
            series=series,
            items=[per_item[item_id] for item_id in sorted(per_item)],
        )

    async def get_inventory_report(self, query: ReportQuery) -> InventoryReport:
        """
        Current stock per store and item with low/out-of-stock classification.

        Not time-bucketed: each inventory row is classified on its own.
        """
        inventory = await self._fetch(
            "fetch inventory",
            self.rows.fetch_inventory(chain_id=query.chain_id, store_id=query.store_id),
        )
        item_ids = sorted({i.item_id for i in inventory})
        store_ids = sorted({i.store_id for i in inventory})

        item_names, store_names, alerts = await asyncio.gather(
            self._fetch("fetch items", self.rows.fetch_item_names(item_ids)),
            self._fetch("fetch stores", self.rows.fetch_store_names(store_ids)),
            self._fetch(
                "fetch alerts",
                self.rows.fetch_stock_alerts(chain_id=query.chain_id, store_id=query.store_id),
            ),
        )

        items = [
            InventoryItemRow(
                item_id=record.item_id,
                item_name=item_names.get(record.item_id, f"Item {record.item_id}"),
                store_id=record.store_id,
                store_name=store_names.get(record.store_id),
                quantity=record.quantity,
                min_stock_level=record.min_stock_level or 0,
                status=record.stock_status,
            )
            for record in inventory
        ]
        summary = InventorySummary(
            total_items=len(items),
            low_stock_count=sum(1 for i in items if i.status == "low"),
            out_of_stock_count=sum(1 for i in items if i.status == "out"),
        )
        return InventoryReport(
            summary=summary,
            items=items,
            alerts=[
                InventoryAlert(
                    id=a.id, message=a.message or "", alert_type=a.alert_type, store_id=a.store_id
                )
                for a in alerts
            ],
        )

    async def get_delivery_report(self, query: ReportQuery) -> DeliveryReport:
        """
        Delivery analytics: shipments per bucket, failures and average transit time.

        Shipments are bucketed by ship date, or by delivery date when they
        have no ship date. ``successRate`` is a percentage rounded to one
        decimal, 0 when there are no shipments.
        """
        shipments = await self._fetch(
            "fetch delivery report",
            self.rows.fetch_shipments(
                chain_id=query.chain_id, store_id=query.store_id,
                date_from=query.date_from, date_to=query.date_to,
            ),
        )

        def reduce(key: str, group: List[ShipmentRecord]) -> DeliverySeriesPoint:
            return DeliverySeriesPoint(
                date=key,
                total=len(group),
                delivered=sum(1 for s in group if s.status == ShipmentStatus.DELIVERED),
                failed=sum(1 for s in group if s.status == ShipmentStatus.FAILED),
                avg_delivery_hours=_avg_delivery_hours(group),
            )

        series = group_by_date(
            shipments, query.group_by, lambda s: s.shipped_date or s.delivered_date, reduce
        )

        total = len(shipments)
        delivered = sum(1 for s in shipments if s.status == ShipmentStatus.DELIVERED)
        failed = sum(1 for s in shipments if s.status == ShipmentStatus.FAILED)
        success_rate = round_half_up(delivered / total * 100) if total else 0.0
        return DeliveryReport(
            summary=DeliverySummary(total=total, delivered=delivered, failed=failed, success_rate=success_rate),
            series=series,
        )

    async def export_report(self, query: ExportQuery) -> ExportedReport:
        """
        Renders a report's series (or inventory items) as CSV.

        PDF rendering is not available: a PDF request gets the very same CSV
        bytes, labelled as CSV, with ``fallback_from`` set to ``"pdf"``.
        """
        if query.type == "orders":
            rows = (await self.get_orders_report(query)).series
        elif query.type == "production":
            rows = (await self.get_production_report(query)).series
        elif query.type == "inventory":
            rows = (await self.get_inventory_report(query)).items
        else:
            rows = (await self.get_delivery_report(query)).series

        csv_text = render_csv(
            (row.model_dump(by_alias=True) for row in rows), CSV_COLUMNS[query.type]
        )
        fallback_from = None
        if query.format == "pdf":
            logger.warning("PDF export requested for %s report; serving CSV instead", query.type)
            fallback_from = "pdf"
        return ExportedReport(
            content=csv_text.encode("utf-8"),
            filename=export_filename(query.type, "csv"),
            fallback_from=fallback_from,
        )
