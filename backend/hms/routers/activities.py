"""
活动记录路由
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from hms.database import get_db
from hms.models.ontology import User
from hms.models.schemas import ActivityCreate, ActivityResponse, TeamActivityResponse
from hms.services.activity_service import ActivityService
from hms.security.auth import require_any_role, require_owner

router = APIRouter(prefix="/activities", tags=["活动记录"])


@router.get("", response_model=List[ActivityResponse])
def list_my_activities(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """我的最近活动"""
    return ActivityService(db).get_user_activities(current_user.id)


@router.get("/team", response_model=List[TeamActivityResponse])
def list_team_activities(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_owner)
):
    """团队动态（仅业主）"""
    return ActivityService(db).get_team_activities()


@router.post("", response_model=ActivityResponse, status_code=status.HTTP_201_CREATED)
def create_activity(
    data: ActivityCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """记录一条备注"""
    try:
        return ActivityService(db).record(current_user.id, data.message)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
