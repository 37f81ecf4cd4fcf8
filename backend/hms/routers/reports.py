"""
报表路由
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from hms.database import get_db
from hms.models.ontology import User
from hms.models.schemas import DashboardMetrics, DailyCashflow, MonthlySummary, RoomTypeShare
from hms.services.report_service import ReportService
from hms.security.auth import require_any_role, require_manager_or_owner

router = APIRouter(prefix="/reports", tags=["统计报表"])


@router.get("/dashboard", response_model=DashboardMetrics)
def get_dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """仪表盘指标"""
    return ReportService(db).get_dashboard_metrics()


@router.get("/cashflow", response_model=List[DailyCashflow])
def get_daily_cashflow(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager_or_owner)
):
    """近 7 日现金流"""
    return ReportService(db).get_daily_cashflow()


@router.get("/monthly", response_model=List[MonthlySummary])
def get_monthly_summary(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager_or_owner)
):
    """月度汇总"""
    return ReportService(db).get_monthly_summary()


@router.get("/room-types", response_model=List[RoomTypeShare])
def get_room_type_occupancy(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """在住房型占比"""
    return ReportService(db).get_room_type_occupancy()
