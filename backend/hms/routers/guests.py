"""
住客路由 - 预订、入住、退房
"""
from typing import List, Optional
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from hms.database import get_db
from hms.domain.lifecycle import BookingStateError
from hms.models.ontology import User, BookingStatus
from hms.models.schemas import (
    BookingCreate, BookingResponse, StayQuoteResponse, CheckOutResponse
)
from hms.services.booking_service import BookingService
from hms.services.checkout_service import CheckOutService
from hms.security.auth import require_any_role, require_manager_or_owner

router = APIRouter(prefix="/guests", tags=["住客管理"])


@router.get("", response_model=List[BookingResponse])
def list_guests(
    search: Optional[str] = None,
    booking_status: Optional[BookingStatus] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """住客列表，支持按姓名 / 房间号 / 邮箱 / 电话搜索"""
    service = BookingService(db)
    return [service.get_booking_detail(b) for b in service.get_bookings(search, booking_status)]


@router.get("/recent", response_model=List[BookingResponse])
def list_recent_guests(
    limit: int = 5,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """最近登记的住客"""
    service = BookingService(db)
    return [service.get_booking_detail(b) for b in service.get_recent_bookings(limit)]


@router.get("/quote", response_model=StayQuoteResponse)
def quote_stay(
    room_id: int,
    check_in: date,
    check_out: date,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """入住晚数与房费报价"""
    try:
        quote = BookingService(db).quote(room_id, check_in, check_out)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return StayQuoteResponse(
        nights=quote.nights,
        price_per_night=quote.price_per_night,
        total_price=quote.total_price
    )


@router.get("/today-expected", response_model=List[BookingResponse])
def get_today_expected_checkouts(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """今日预计退房"""
    booking_service = BookingService(db)
    return [
        booking_service.get_booking_detail(b)
        for b in CheckOutService(db).get_today_expected_checkouts()
    ]


@router.get("/overdue", response_model=List[BookingResponse])
def get_overdue_stays(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """逾期未退房"""
    booking_service = BookingService(db)
    return [
        booking_service.get_booking_detail(b)
        for b in CheckOutService(db).get_overdue_stays()
    ]


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager_or_owner)
):
    """新建预订或直接入住"""
    service = BookingService(db)
    try:
        booking = service.create_booking(data, current_user)
    except BookingStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return service.get_booking_detail(booking)


@router.get("/{booking_id}", response_model=BookingResponse)
def get_guest(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """住客详情"""
    service = BookingService(db)
    booking = service.get_booking(booking_id)
    if not booking:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="住客记录不存在")
    return service.get_booking_detail(booking)


@router.post("/{booking_id}/check-in", response_model=BookingResponse)
def check_in_reservation(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager_or_owner)
):
    """预订到店入住"""
    service = BookingService(db)
    if not service.get_booking(booking_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="住客记录不存在")
    try:
        booking = service.check_in_reservation(booking_id, current_user)
    except BookingStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return service.get_booking_detail(booking)


@router.post("/{booking_id}/checkout", response_model=CheckOutResponse)
def check_out(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager_or_owner)
):
    """退房，房间进入清洁，到期后自动释放"""
    service = CheckOutService(db)
    if not BookingService(db).get_booking(booking_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="住客记录不存在")
    try:
        booking = service.check_out(booking_id, current_user)
    except BookingStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    room = booking.room
    return CheckOutResponse(
        message="退房成功",
        booking_id=booking.id,
        room_id=room.id if room else None,
        room_status=room.status if room else None,
        available_at=room.available_at if room else None
    )
