"""
财务路由
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from hms.database import get_db
from hms.models.ontology import User, TransactionType
from hms.models.schemas import TransactionCreate, TransactionResponse, TransactionTotals
from hms.services.finance_service import FinanceService
from hms.security.auth import require_owner, require_manager_or_owner

router = APIRouter(prefix="/finances", tags=["财务管理"])


@router.get("/transactions", response_model=List[TransactionResponse])
def list_transactions(
    type: Optional[TransactionType] = None,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager_or_owner)
):
    """流水列表（日期倒序）"""
    return FinanceService(db).get_transactions(type, limit)


@router.get("/transactions/recent", response_model=List[TransactionResponse])
def list_recent_transactions(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager_or_owner)
):
    """最近 5 笔流水"""
    return FinanceService(db).get_transactions(limit=5)


@router.get("/totals", response_model=TransactionTotals)
def get_totals(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager_or_owner)
):
    """收支合计"""
    return FinanceService(db).get_totals()


@router.post("/transactions", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def create_transaction(
    data: TransactionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_owner)
):
    """新增手工流水（仅业主）"""
    try:
        return FinanceService(db).create_transaction(data, current_user.id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
