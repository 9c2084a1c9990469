"""Reporting router — dashboard summary, reminders and CSV export."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from covera.core.config import settings
from covera.core.response import DataResponse
from covera.db.base import get_db
from covera.schemas.report import ComplianceSummary, UpcomingReminder
from covera.services.reports import ReportService

router = APIRouter(prefix="/reports", tags=["Reports"])


def _svc(session: AsyncSession) -> ReportService:
    return ReportService(session, settings.default_org_id)


@router.get("/summary", response_model=DataResponse[ComplianceSummary])
async def compliance_summary(session: AsyncSession = Depends(get_db)):
    summary = await _svc(session).compliance_summary()
    return {"data": summary}


@router.get("/reminders", response_model=DataResponse[list[UpcomingReminder]])
async def upcoming_reminders(
    limit: int = Query(default=5, ge=1, le=100),
    session: AsyncSession = Depends(get_db),
):
    """Vendors whose insurance expires within 30 days, bucketed 1/7/14/30."""
    reminders = await _svc(session).upcoming_reminders(limit=limit)
    return {"data": reminders}


@router.get("/vendors.csv", response_class=Response)
async def export_vendors_csv(session: AsyncSession = Depends(get_db)):
    content = await _svc(session).vendor_csv()
    filename = f"Covera_Vendor_Export_{date.today().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
