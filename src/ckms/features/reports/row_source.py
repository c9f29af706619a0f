"""Read access to the tables the reports aggregate.

``RowSource`` is the seam between the report builders and storage. The
service only depends on the protocol, so tests hand it an in-memory fake while
the API wires in ``TortoiseRowSource``.
"""
import datetime
import logging
from typing import Any, Callable, Collection, Dict, Iterable, List, Optional, Protocol, Type, TypeVar

from pydantic import BaseModel, ValidationError
from tortoise.exceptions import BaseORMException

from ..inventory.models import Alert, Inventory, Item
from ..orders.models import Order, Shipment
from ..production.models import ProductionDetail, ProductionPlan
from ..stores.models import Store
from .records import (
    AlertRecord,
    InventoryRecord,
    OrderRecord,
    ProductionDetailRecord,
    ProductionPlanRecord,
    ShipmentRecord,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class RowSourceError(Exception):
    """The underlying store failed; distinct from a read that found no rows."""

    def __init__(self, context: str):
        super().__init__(context)
        self.context = context


def day_start(day: datetime.date) -> datetime.datetime:
    return datetime.datetime.combine(day, datetime.time(0, 0, 0), tzinfo=datetime.timezone.utc)


def day_end(day: datetime.date) -> datetime.datetime:
    return datetime.datetime.combine(day, datetime.time(23, 59, 59), tzinfo=datetime.timezone.utc)


class RowSource(Protocol):
    async def fetch_orders(
        self,
        *,
        chain_id: Optional[int] = None,
        store_id: Optional[int] = None,
        date_from: Optional[datetime.date] = None,
        date_to: Optional[datetime.date] = None,
    ) -> List[OrderRecord]: ...

    async def fetch_shipments(
        self,
        *,
        chain_id: Optional[int] = None,
        store_id: Optional[int] = None,
        date_from: Optional[datetime.date] = None,
        date_to: Optional[datetime.date] = None,
        exclude_statuses: Collection[str] = (),
    ) -> List[ShipmentRecord]: ...

    async def fetch_stock_alerts(
        self,
        *,
        chain_id: Optional[int] = None,
        store_id: Optional[int] = None,
        alert_types: Optional[Collection[str]] = None,
    ) -> List[AlertRecord]: ...

    async def fetch_production_plans(self, *, chain_id: Optional[int] = None) -> List[ProductionPlanRecord]: ...

    async def fetch_production_details(self, plan_ids: Collection[int]) -> List[ProductionDetailRecord]: ...

    async def fetch_inventory(
        self, *, chain_id: Optional[int] = None, store_id: Optional[int] = None
    ) -> List[InventoryRecord]: ...

    async def fetch_item_names(self, item_ids: Collection[int]) -> Dict[int, str]: ...

    async def fetch_store_names(self, store_ids: Collection[int]) -> Dict[int, str]: ...


class TortoiseRowSource:
    """RowSource backed by the Tortoise ORM models."""

    async def _read(
        self, context: str, build_query: Callable[[], Any], record_type: Type[RecordT]
    ) -> List[RecordT]:
        try:
            rows = await build_query()
        except BaseORMException as exc:
            raise RowSourceError(context) from exc
        try:
            records = [record_type.model_validate(row) for row in rows]
        except ValidationError as exc:
            raise RowSourceError(f"{context}: malformed row") from exc
        logger.debug("%s: %d rows", context, len(records))
        return records

    async def _names(self, context: str, model, ids: Iterable[int]) -> Dict[int, str]:
        ids = list(ids)
        if not ids:
            return {}
        try:
            rows = await model.filter(id__in=ids).values("id", "name")
        except BaseORMException as exc:
            raise RowSourceError(context) from exc
        return {row["id"]: row["name"] for row in rows}

    async def fetch_orders(self, *, chain_id=None, store_id=None, date_from=None, date_to=None) -> List[OrderRecord]:
        def build():
            query = Order.all()
            if chain_id is not None:
                query = query.filter(chain_id=chain_id)
            if store_id is not None:
                query = query.filter(store_id=store_id)
            if date_from:
                query = query.filter(created_at__gte=day_start(date_from))
            if date_to:
                query = query.filter(created_at__lte=day_end(date_to))
            return query.order_by("created_at").values(
                "id", "status", "total_amount", "created_at", "store_id", "chain_id"
            )

        return await self._read("fetch orders", build, OrderRecord)

    async def fetch_shipments(
        self, *, chain_id=None, store_id=None, date_from=None, date_to=None, exclude_statuses=()
    ) -> List[ShipmentRecord]:
        def build():
            query = Shipment.all()
            if chain_id is not None:
                query = query.filter(order__chain_id=chain_id)
            if store_id is not None:
                query = query.filter(order__store_id=store_id)
            if date_from:
                query = query.filter(shipped_date__gte=day_start(date_from))
            if date_to:
                query = query.filter(shipped_date__lte=day_end(date_to))
            if exclude_statuses:
                query = query.exclude(status__in=list(exclude_statuses))
            return query.order_by("shipped_date").values(
                "id", "status", "shipped_date", "delivered_date", "order_id"
            )

        return await self._read("fetch shipments", build, ShipmentRecord)

    async def fetch_stock_alerts(self, *, chain_id=None, store_id=None, alert_types=None) -> List[AlertRecord]:
        def build():
            query = Alert.filter(is_resolved=False)
            if chain_id is not None:
                query = query.filter(store__chain_id=chain_id)
            if store_id is not None:
                query = query.filter(store_id=store_id)
            if alert_types is not None:
                query = query.filter(alert_type__in=list(alert_types))
            return query.order_by("id").values(
                "id", "store_id", "item_id", "message", "alert_type", "is_resolved"
            )

        return await self._read("fetch alerts", build, AlertRecord)

    async def fetch_production_plans(self, *, chain_id=None) -> List[ProductionPlanRecord]:
        def build():
            query = ProductionPlan.all()
            if chain_id is not None:
                query = query.filter(chain_id=chain_id)
            return query.order_by("start_date").values("id", "chain_id", "start_date", "status")

        return await self._read("fetch production plans", build, ProductionPlanRecord)

    async def fetch_production_details(self, plan_ids) -> List[ProductionDetailRecord]:
        plan_ids = list(plan_ids)
        if not plan_ids:
            return []

        def build():
            return ProductionDetail.filter(plan_id__in=plan_ids).order_by("id").values(
                "id", "plan_id", "item_id", "quantity_planned", "quantity_produced",
                "status", "started_at", "completed_at",
            )

        return await self._read("fetch production details", build, ProductionDetailRecord)

    async def fetch_inventory(self, *, chain_id=None, store_id=None) -> List[InventoryRecord]:
        def build():
            query = Inventory.all()
            if chain_id is not None:
                query = query.filter(store__chain_id=chain_id)
            if store_id is not None:
                query = query.filter(store_id=store_id)
            return query.order_by("id").values(
                "id", "store_id", "item_id", "quantity", "min_stock_level", "max_stock_level"
            )

        return await self._read("fetch inventory", build, InventoryRecord)

    async def fetch_item_names(self, item_ids) -> Dict[int, str]:
        return await self._names("fetch items", Item, item_ids)

    async def fetch_store_names(self, store_ids) -> Dict[int, str]:
        return await self._names("fetch stores", Store, store_ids)
