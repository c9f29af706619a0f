"""In-memory stand-ins used by the reports tests."""
import datetime
from typing import Any, Dict, List, Optional

from ckms.features.reports.records import (
    AlertRecord,
    InventoryRecord,
    OrderRecord,
    ProductionDetailRecord,
    ProductionPlanRecord,
    ShipmentRecord,
)
from ckms.features.reports.row_source import RowSourceError, day_end, day_start

UTC = datetime.timezone.utc


def utc(year, month, day, hour=0, minute=0) -> datetime.datetime:
    return datetime.datetime(year, month, day, hour, minute, tzinfo=UTC)


class InMemoryRowSource:
    """RowSource over plain lists, with the same filtering rules as the ORM one.

    Every call is recorded in ``calls``; names listed in ``failing`` raise
    RowSourceError instead of returning rows.
    """

    def __init__(
        self,
        orders: Optional[List[OrderRecord]] = None,
        shipments: Optional[List[ShipmentRecord]] = None,
        plans: Optional[List[ProductionPlanRecord]] = None,
        details: Optional[List[ProductionDetailRecord]] = None,
        inventory: Optional[List[InventoryRecord]] = None,
        alerts: Optional[List[AlertRecord]] = None,
        items: Optional[Dict[int, str]] = None,
        stores: Optional[Dict[int, str]] = None,
        store_chains: Optional[Dict[int, int]] = None,
    ):
        self.orders = list(orders or [])
        self.shipments = list(shipments or [])
        self.plans = list(plans or [])
        self.details = list(details or [])
        self.inventory = list(inventory or [])
        self.alerts = list(alerts or [])
        self.items = dict(items or {})
        self.stores = dict(stores or {})
        self.store_chains = dict(store_chains or {})
        self.calls: List[tuple] = []
        self.failing: set = set()

    def _record(self, name: str, **kwargs: Any) -> None:
        self.calls.append((name, kwargs))
        if name in self.failing:
            raise RowSourceError(f"{name}: connection refused by upstream")

    def _store_in_chain(self, store_id: int, chain_id: Optional[int]) -> bool:
        return chain_id is None or self.store_chains.get(store_id) == chain_id

    async def fetch_orders(self, *, chain_id=None, store_id=None, date_from=None, date_to=None):
        self._record("fetch_orders", chain_id=chain_id, store_id=store_id, date_from=date_from, date_to=date_to)
        rows = [
            o for o in self.orders
            if (chain_id is None or o.chain_id == chain_id)
            and (store_id is None or o.store_id == store_id)
            and (not date_from or o.created_at >= day_start(date_from))
            and (not date_to or o.created_at <= day_end(date_to))
        ]
        return sorted(rows, key=lambda o: o.created_at)

    async def fetch_shipments(self, *, chain_id=None, store_id=None, date_from=None, date_to=None, exclude_statuses=()):
        self._record(
            "fetch_shipments", chain_id=chain_id, store_id=store_id,
            date_from=date_from, date_to=date_to, exclude_statuses=tuple(exclude_statuses),
        )
        orders = {o.id: o for o in self.orders}

        def keep(s: ShipmentRecord) -> bool:
            order = orders.get(s.order_id)
            if chain_id is not None and (order is None or order.chain_id != chain_id):
                return False
            if store_id is not None and (order is None or order.store_id != store_id):
                return False
            if (date_from or date_to) and s.shipped_date is None:
                return False
            if date_from and s.shipped_date < day_start(date_from):
                return False
            if date_to and s.shipped_date > day_end(date_to):
                return False
            return s.status not in exclude_statuses

        return [s for s in self.shipments if keep(s)]

    async def fetch_stock_alerts(self, *, chain_id=None, store_id=None, alert_types=None):
        self._record("fetch_stock_alerts", chain_id=chain_id, store_id=store_id, alert_types=alert_types)
        return [
            a for a in self.alerts
            if not a.is_resolved
            and self._store_in_chain(a.store_id, chain_id)
            and (store_id is None or a.store_id == store_id)
            and (alert_types is None or a.alert_type in alert_types)
        ]

    async def fetch_production_plans(self, *, chain_id=None):
        self._record("fetch_production_plans", chain_id=chain_id)
        return [p for p in self.plans if chain_id is None or p.chain_id == chain_id]

    async def fetch_production_details(self, plan_ids):
        plan_ids = list(plan_ids)
        self._record("fetch_production_details", plan_ids=plan_ids)
        return [d for d in self.details if d.plan_id in plan_ids]

    async def fetch_inventory(self, *, chain_id=None, store_id=None):
        self._record("fetch_inventory", chain_id=chain_id, store_id=store_id)
        return [
            i for i in self.inventory
            if self._store_in_chain(i.store_id, chain_id) and (store_id is None or i.store_id == store_id)
        ]

    async def fetch_item_names(self, item_ids):
        item_ids = list(item_ids)
        self._record("fetch_item_names", item_ids=item_ids)
        return {i: self.items[i] for i in item_ids if i in self.items}

    async def fetch_store_names(self, store_ids):
        store_ids = list(store_ids)
        self._record("fetch_store_names", store_ids=store_ids)
        return {s: self.stores[s] for s in store_ids if s in self.stores}

    def called(self, name: str) -> List[dict]:
        return [kwargs for call, kwargs in self.calls if call == name]


def order(id, status, total_amount, created_at, store_id=10, chain_id=1) -> OrderRecord:
    return OrderRecord(
        id=id, status=status, total_amount=total_amount, created_at=created_at,
        store_id=store_id, chain_id=chain_id,
    )


def shipment(id, status, shipped_date=None, delivered_date=None, order_id=1) -> ShipmentRecord:
    return ShipmentRecord(
        id=id, status=status, shipped_date=shipped_date, delivered_date=delivered_date, order_id=order_id
    )
