"""
房间管理路由
"""
from typing import List, Optional
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from hms.database import get_db
from hms.models.ontology import User, RoomStatus
from hms.models.schemas import (
    RoomTypeCreate, RoomTypeResponse, RoomCreate, RoomUpdate, RoomResponse,
    RoomStatusUpdate, AvailabilityResponse, RoomOptionResponse, RoomTypeOptionResponse,
    RoomStatusViewResponse
)
from hms.services.room_service import RoomService
from hms.security.auth import require_any_role, require_owner, require_manager_or_owner

router = APIRouter(prefix="/rooms", tags=["房间管理"])


# ============== 房型管理 ==============

@router.get("/types", response_model=List[RoomTypeResponse])
def list_room_types(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """获取所有房型"""
    service = RoomService(db)
    return [
        RoomTypeResponse(**service.get_room_type_with_count(rt.id))
        for rt in service.get_room_types()
    ]


@router.post("/types", response_model=RoomTypeResponse, status_code=status.HTTP_201_CREATED)
def create_room_type(
    data: RoomTypeCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_owner)
):
    """创建房型"""
    service = RoomService(db)
    try:
        room_type = service.create_room_type(data, current_user.id)
        return RoomTypeResponse(**service.get_room_type_with_count(room_type.id))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


# ============== 可售房间 / 房态看板 ==============

@router.get("/availability", response_model=AvailabilityResponse)
def get_availability(
    room_type_id: Optional[int] = None,
    check_in: Optional[date] = None,
    check_out: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """可预订的房型与房间（存储状态为 available）"""
    result = RoomService(db).get_availability(room_type_id, check_in, check_out)
    return AvailabilityResponse(
        room_types=[RoomTypeOptionResponse.model_validate(o) for o in result['room_types']],
        rooms=[RoomOptionResponse.model_validate(o) for o in result['rooms']]
    )


@router.get("/status-board", response_model=List[RoomStatusViewResponse])
def get_status_board(
    on_date: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """指定日期的房态（存储状态与展示状态）"""
    views = RoomService(db).get_status_board(on_date)
    return [RoomStatusViewResponse.model_validate(v) for v in views]


@router.get("/summary")
def get_room_status_summary(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """房间状态统计"""
    return RoomService(db).get_room_status_summary()


# ============== 房间管理 ==============

@router.get("", response_model=List[RoomResponse])
def list_rooms(
    room_type_id: Optional[int] = None,
    status: Optional[RoomStatus] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """获取房间列表"""
    return RoomService(db).get_rooms(room_type_id, status)


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(
    room_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """获取房间详情"""
    room = RoomService(db).get_room(room_id)
    if not room:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="房间不存在")
    return room


@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
def create_room(
    data: RoomCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager_or_owner)
):
    """创建房间"""
    try:
        return RoomService(db).create_room(data, current_user.id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/{room_id}", response_model=RoomResponse)
def update_room(
    room_id: int,
    data: RoomUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager_or_owner)
):
    """更新房间"""
    try:
        return RoomService(db).update_room(room_id, data, current_user.id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.patch("/{room_id}/status", response_model=RoomResponse)
def update_room_status(
    room_id: int,
    data: RoomStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager_or_owner)
):
    """手动修改房间状态"""
    try:
        return RoomService(db).update_room_status(room_id, data.status, current_user.id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{room_id}")
def delete_room(
    room_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager_or_owner)
):
    """删除房间"""
    try:
        RoomService(db).delete_room(room_id, current_user.id)
        return {"message": "删除成功"}
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
