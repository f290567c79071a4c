"""
Report Endpoints Module

A single ``GET /reports?action=...`` route serving the dashboard reports:

- ``overview``: counts, total used hours and hours-based billed amount
- ``monthly``: contract hours of one month grouped by client (``year``, ``month``)
- ``active_contracts``: progress of every active contract
- ``time-entries``: enriched entries in an optional date range, with totals

Time-entry reports are open to client accounts; everything else needs the
view-reports permission.
"""
from datetime import date
from enum import Enum
from typing import Any, Optional
from fastapi import APIRouter, Depends

from app.api import deps
from app.api.responses import ok
from app.core.exceptions import Forbidden, ValidationError
from app.core.permissions import Permission, has_permission
from app.models.user import User
from app.services.reports import Reports

router = APIRouter()


class ReportAction(str, Enum):
    overview = "overview"
    monthly = "monthly"
    active_contracts = "active_contracts"
    time_entries = "time-entries"


@router.get("")
def read_report(
    action: ReportAction = ReportAction.overview,
    year: Optional[int] = None,
    month: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    reports: Reports = Depends(deps.get_reports),
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Compute one report. Figures are rebuilt from time entries and payments
    on every request.

    Raises:
        Forbidden: If the caller's role can't see this report
        ValidationError: If monthly is missing year/month
    """
    needed = Permission.VIEW_TIME_REPORTS if action == ReportAction.time_entries else Permission.VIEW_REPORTS
    if not has_permission(current_user.role, needed):
        raise Forbidden(f"Your role does not allow this action ({needed.value})")

    if action == ReportAction.overview:
        return ok(stats=reports.overview())
    if action == ReportAction.monthly:
        if year is None or month is None:
            raise ValidationError("year and month are required for the monthly report")
        return ok(data=reports.monthly(year, month), period={"year": year, "month": month})
    if action == ReportAction.active_contracts:
        return ok(data=reports.active_contracts())

    entries, summary = reports.time_entries_report(start_date, end_date)
    return ok(data=entries, summary=summary)
