"""Fixtures for the reports feature: an in-memory row source and an API client wired to it."""
import datetime
from typing import Any, AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from ckms.features.reports.records import (
    AlertRecord,
    InventoryRecord,
    ProductionDetailRecord,
    ProductionPlanRecord,
)
from ckms.features.reports.router import get_reports_service
from ckms.features.reports.service import ReportsService

from .fakes import InMemoryRowSource, order, shipment, utc


@pytest.fixture
def row_source() -> InMemoryRowSource:
    """A small two-chain dataset; chain 1 owns stores 10 and 11, chain 2 owns store 20."""
    return InMemoryRowSource(
        orders=[
            order(1, "delivered", 100, utc(2026, 1, 1, 9)),
            order(2, "cancelled", 50, utc(2026, 1, 1, 15)),
            order(3, "delivered", 200, utc(2026, 1, 2, 8)),
            order(4, "submitted", None, utc(2026, 1, 9, 8), store_id=11),
            order(5, "delivered", 999, utc(2026, 1, 2, 8), store_id=20, chain_id=2),
        ],
        shipments=[
            shipment(1, "delivered", utc(2026, 1, 1, 10), utc(2026, 1, 1, 13), order_id=1),
            shipment(2, "failed", utc(2026, 1, 1, 16), None, order_id=2),
            shipment(3, "delivered", utc(2026, 1, 2, 9), utc(2026, 1, 2, 11), order_id=3),
            shipment(4, "in_transit", utc(2026, 1, 9, 9), None, order_id=4),
            shipment(5, "pending", utc(2026, 1, 2, 9), None, order_id=5),
        ],
        plans=[
            ProductionPlanRecord(id=1, chain_id=1, start_date=datetime.date(2026, 1, 1), status="completed"),
            ProductionPlanRecord(id=2, chain_id=1, start_date=None, status="in_progress"),
            ProductionPlanRecord(id=3, chain_id=2, start_date=datetime.date(2026, 1, 1), status="completed"),
        ],
        details=[
            ProductionDetailRecord(id=1, plan_id=1, item_id=100, quantity_planned=10, quantity_produced=8),
            ProductionDetailRecord(id=2, plan_id=1, item_id=101, quantity_planned=5, quantity_produced=5),
            ProductionDetailRecord(
                id=3, plan_id=2, item_id=100, quantity_planned=4, quantity_produced=4,
                started_at=utc(2026, 1, 3, 6),
            ),
            ProductionDetailRecord(id=4, plan_id=2, item_id=102, quantity_planned=7, quantity_produced=0),
            ProductionDetailRecord(id=5, plan_id=3, item_id=100, quantity_planned=99, quantity_produced=99),
        ],
        inventory=[
            InventoryRecord(id=1, store_id=10, item_id=100, quantity=0, min_stock_level=5),
            InventoryRecord(id=2, store_id=10, item_id=101, quantity=3, min_stock_level=5),
            InventoryRecord(id=3, store_id=11, item_id=100, quantity=10, min_stock_level=5),
            InventoryRecord(id=4, store_id=11, item_id=103, quantity=1, min_stock_level=None),
            InventoryRecord(id=5, store_id=20, item_id=100, quantity=0, min_stock_level=5),
        ],
        alerts=[
            AlertRecord(id=1, store_id=10, item_id=100, message="Out of rice", alert_type="out_of_stock"),
            AlertRecord(id=2, store_id=10, item_id=101, message=None, alert_type="low_stock"),
            AlertRecord(id=3, store_id=11, item_id=None, message="Late delivery", alert_type="delivery_delay"),
            AlertRecord(id=4, store_id=10, item_id=101, message="Fixed", alert_type="low_stock", is_resolved=True),
            AlertRecord(id=5, store_id=20, item_id=100, message="Other chain", alert_type="low_stock"),
        ],
        items={100: 'Rice, 5kg "Premium"', 101: "Fish sauce", 103: "Chili"},
        stores={10: "District 1", 11: "District 3", 20: "Hanoi"},
        store_chains={10: 1, 11: 1, 20: 2},
    )


@pytest.fixture
def service(row_source: InMemoryRowSource) -> ReportsService:
    return ReportsService(row_source)


@pytest_asyncio.fixture
async def reports_client(
    app_for_testing: FastAPI, row_source: InMemoryRowSource
) -> AsyncGenerator[AsyncClient, Any]:
    """A client whose report endpoints read from ``row_source`` instead of the database."""
    app_for_testing.dependency_overrides[get_reports_service] = lambda: ReportsService(row_source)
    transport = ASGITransport(app=app_for_testing)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
