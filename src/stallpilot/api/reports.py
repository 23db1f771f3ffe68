# File: src/stallpilot/api/reports.py
"""Weekly and monthly profit reports."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from stallpilot.api.auth import require_admin
from stallpilot.core.db import get_db
from stallpilot.core.errors import ValidationError
from stallpilot.core.reports import get_period_report
from stallpilot.models.enums import ReportPeriod
from stallpilot.models.report_schemas import PeriodReport
from stallpilot.models.user import User
from stallpilot.utils.datetime import parse_date_only

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/{period}", response_model=PeriodReport)
async def period_report(
    period: ReportPeriod,
    base: str | None = Query(None, description="Any day inside the period (YYYY-MM-DD)"),
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> PeriodReport:
    """
    Profit for the week (Monday to Sunday) or month containing ``base``.

    Days before the first financial config have zero costs and are listed
    in ``missing_config_days``.
    """
    try:
        base_day = parse_date_only(base) if base else None
    except ValueError as exc:
        raise ValidationError(str(exc), details={"field": "base"}) from exc
    return await get_period_report(db, period, base_day)
