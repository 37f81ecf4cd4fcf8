"""
酒店设施路由
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from hms.database import get_db
from hms.models.ontology import User
from hms.models.schemas import FacilityCreate, FacilityResponse
from hms.services.facility_service import FacilityService
from hms.security.auth import require_any_role, require_owner

router = APIRouter(prefix="/facilities", tags=["设施"])


@router.get("", response_model=List[FacilityResponse])
def list_facilities(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    return FacilityService(db).get_facilities()


@router.post("", response_model=FacilityResponse, status_code=status.HTTP_201_CREATED)
def create_facility(
    data: FacilityCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_owner)
):
    """新增设施（仅业主）"""
    try:
        return FacilityService(db).create_facility(data, current_user.id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
