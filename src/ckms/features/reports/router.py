"""Reporting API endpoints for the central kitchen dashboard

Overview counters plus orders, production, inventory and delivery analytics,
and CSV export. Every endpoint requires an admin or manager token and is
scoped to the caller's chain. Handlers delegate to ``ReportsService``, which
gets its row source from ``get_reports_service`` so tests can swap it out."""
import datetime
import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import ValidationError

from ..auth.schemas import AuthUser
from ..auth.security import REPORT_ROLES, require_roles
from .grouping import Granularity
from .row_source import TortoiseRowSource
from .schemas import (
    DashboardOverview, DeliveryReport, ExportFormat, ExportQuery,
    InventoryReport, OrdersReport, ProductionReport, ReportQuery, ReportType,
)
from .service import ReportsService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    responses={404: {"description": "Not found"}},
)

ReportUser = Annotated[AuthUser, Depends(require_roles(*REPORT_ROLES))]


def get_reports_service() -> ReportsService:
    return ReportsService(TortoiseRowSource())


def _build_query(model, **values):
    try:
        return model(**values)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="; ".join(err["msg"] for err in e.errors()),
        )


def report_query(
    current_user: ReportUser,
    date_from: Optional[datetime.date] = Query(None, alias="dateFrom", description="Start date (YYYY-MM-DD)"),
    date_to: Optional[datetime.date] = Query(None, alias="dateTo", description="End date (YYYY-MM-DD)"),
    store_id: Optional[int] = Query(None, alias="storeId", gt=0, description="Filter by store ID"),
    group_by: Granularity = Query("day", alias="groupBy", description="Group results by"),
) -> ReportQuery:
    return _build_query(
        ReportQuery, date_from=date_from, date_to=date_to, store_id=store_id,
        group_by=group_by, chain_id=current_user.chain_id,
    )


def export_query(
    query: Annotated[ReportQuery, Depends(report_query)],
    report_type: ReportType = Query("orders", alias="type", description="Report type"),
    export_format: ExportFormat = Query("csv", alias="format", description="Export format"),
) -> ExportQuery:
    return _build_query(ExportQuery, **query.model_dump(), type=report_type, format=export_format)


Service = Annotated[ReportsService, Depends(get_reports_service)]


@router.get("/overview", response_model=DashboardOverview)
async def get_overview(current_user: ReportUser, service: Service):
    return await service.get_overview(chain_id=current_user.chain_id)


@router.get("/orders", response_model=OrdersReport)
async def get_orders_report(query: Annotated[ReportQuery, Depends(report_query)], service: Service):
    return await service.get_orders_report(query)


@router.get("/production", response_model=ProductionReport)
async def get_production_report(query: Annotated[ReportQuery, Depends(report_query)], service: Service):
    return await service.get_production_report(query)


@router.get("/inventory", response_model=InventoryReport)
async def get_inventory_report(query: Annotated[ReportQuery, Depends(report_query)], service: Service):
    return await service.get_inventory_report(query)


@router.get("/delivery", response_model=DeliveryReport, response_model_exclude_none=True)
async def get_delivery_report(query: Annotated[ReportQuery, Depends(report_query)], service: Service):
    return await service.get_delivery_report(query)


@router.get("/export", response_class=Response, responses={200: {"content": {"text/csv": {}}}})
async def export_report(query: Annotated[ExportQuery, Depends(export_query)], service: Service):
    exported = await service.export_report(query)
    headers = {"Content-Disposition": f'attachment; filename="{exported.filename}"'}
    if exported.fallback_from:
        headers["X-Export-Fallback"] = "csv"
    return Response(content=exported.content, media_type=exported.media_type, headers=headers)
