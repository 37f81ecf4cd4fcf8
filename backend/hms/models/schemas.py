"""
Pydantic 模式定义
用于 API 请求/响应验证
"""
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field, field_validator, ConfigDict
from hms.models.ontology import (
    RoomStatus, BookingStatus, PaymentStatus, TransactionType, UserRole, MenuCategory
)


def _required_text(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError("不能为空")
    return value


# ============== 认证 / 用户 Schemas ==============

class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    name: str = Field(..., max_length=100)
    email: str = Field(..., max_length=100)
    password: str = Field(..., min_length=6)

    @field_validator('name', 'email')
    @classmethod
    def check_required(cls, v: str) -> str:
        return _required_text(v)


class UserCreate(RegisterRequest):
    role: UserRole = UserRole.STAFF


class UserRoleUpdate(BaseModel):
    role: UserRole


class PasswordReset(BaseModel):
    new_password: str = Field(..., min_length=6)


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: UserRole
    is_active: bool
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


# ============== 活动记录 Schemas ==============

class ActivityCreate(BaseModel):
    message: str = Field(..., max_length=500)

    @field_validator('message')
    @classmethod
    def check_required(cls, v: str) -> str:
        return _required_text(v)


class ActivityResponse(BaseModel):
    id: int
    user_id: int
    message: str
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class TeamActivityResponse(ActivityResponse):
    user_name: Optional[str] = None
    user_role: Optional[UserRole] = None


# ============== 房型 / 房间 Schemas ==============

class RoomTypeCreate(BaseModel):
    name: str = Field(..., max_length=50)

    @field_validator('name')
    @classmethod
    def check_required(cls, v: str) -> str:
        return _required_text(v)


class RoomTypeResponse(BaseModel):
    id: int
    name: str
    created_at: datetime
    room_count: int = 0
    model_config = ConfigDict(from_attributes=True)


class RoomCreate(BaseModel):
    number: str = Field(..., max_length=10)
    room_type_id: int
    price: Decimal = Field(..., ge=0)

    @field_validator('number')
    @classmethod
    def check_required(cls, v: str) -> str:
        return _required_text(v)


class RoomUpdate(BaseModel):
    number: Optional[str] = Field(None, max_length=10)
    room_type_id: Optional[int] = None
    price: Optional[Decimal] = Field(None, ge=0)


class RoomStatusUpdate(BaseModel):
    status: RoomStatus


class RoomResponse(BaseModel):
    id: int
    number: str
    room_type_id: Optional[int] = None
    type_name: str = "-"
    price: Decimal
    status: RoomStatus
    reservation_date: Optional[date] = None
    check_out_date: Optional[date] = None
    available_at: Optional[datetime] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class RoomOptionResponse(BaseModel):
    id: int
    number: str
    price: Decimal
    type_name: str
    room_type_id: Optional[int] = None
    conflicting_booking_ids: List[int] = []
    model_config = ConfigDict(from_attributes=True)


class RoomTypeOptionResponse(BaseModel):
    id: int
    name: str
    price: Decimal
    model_config = ConfigDict(from_attributes=True)


class AvailabilityResponse(BaseModel):
    room_types: List[RoomTypeOptionResponse]
    rooms: List[RoomOptionResponse]


class BookingSummaryResponse(BaseModel):
    id: int
    guest_name: str
    booking_status: BookingStatus
    payment_status: Optional[PaymentStatus] = None
    check_in: date
    check_out: date
    model_config = ConfigDict(from_attributes=True)


class RoomStatusViewResponse(BaseModel):
    """存储状态与按日期推导的展示状态分别给出"""
    room_id: int
    number: str
    type_name: str
    stored_status: RoomStatus
    display_status: RoomStatus
    diverged: bool
    bookings: List[BookingSummaryResponse] = []
    model_config = ConfigDict(from_attributes=True)


# ============== 住客 / 预订 Schemas ==============

class StayQuoteResponse(BaseModel):
    nights: int
    price_per_night: Decimal
    total_price: Decimal


class BookingCreate(BaseModel):
    name: str = Field(..., max_length=100)
    phone: str = Field(..., max_length=30)
    email: Optional[str] = Field(None, max_length=100)
    check_in: date
    check_out: date
    room_type_id: Optional[int] = None
    room_id: Optional[int] = None
    booking_status: BookingStatus = BookingStatus.RESERVATION
    payment_method: Optional[str] = Field(None, max_length=30)
    payment_status: PaymentStatus = PaymentStatus.UNPAID

    @field_validator('name', 'phone')
    @classmethod
    def check_required(cls, v: str) -> str:
        return _required_text(v)

    @field_validator('email')
    @classmethod
    def strip_email(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v


class BookingResponse(BaseModel):
    id: int
    name: str
    phone: str
    email: Optional[str] = None
    check_in: date
    check_out: date
    room_id: int
    room_number: Optional[str] = None
    room_type_name: Optional[str] = None
    nights: int
    price_per_night: Decimal
    total_price: Decimal
    payment_method: Optional[str] = None
    payment_status: Optional[PaymentStatus] = None
    booking_status: BookingStatus
    received_by: Optional[int] = None
    received_by_name: Optional[str] = None
    created_at: datetime


class CheckOutResponse(BaseModel):
    message: str
    booking_id: int
    room_id: Optional[int] = None
    room_status: Optional[RoomStatus] = None
    available_at: Optional[datetime] = None


# ============== 财务 Schemas ==============

class TransactionCreate(BaseModel):
    type: TransactionType
    amount: Decimal = Field(..., gt=0)
    category: str = Field(..., max_length=50)
    description: str
    date: date

    @field_validator('category', 'description')
    @classmethod
    def check_required(cls, v: str) -> str:
        return _required_text(v)


class TransactionResponse(BaseModel):
    id: int
    type: TransactionType
    amount: Decimal
    category: str
    description: str
    date: date
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class TransactionTotals(BaseModel):
    income: Decimal
    expense: Decimal
    balance: Decimal


# ============== 报表 Schemas ==============

class DashboardMetrics(BaseModel):
    total_guests: int
    available_rooms: int
    revenue_today: Decimal
    occupancy_rate: float


class DailyCashflow(BaseModel):
    date: date
    income: Decimal
    expense: Decimal


class MonthlySummary(BaseModel):
    period: str
    revenue: Decimal
    expenses: Decimal
    profit: Decimal


class RoomTypeShare(BaseModel):
    name: str
    value: float


# ============== 餐厅 / 设施 Schemas ==============

class MenuItemCreate(BaseModel):
    name: str = Field(..., max_length=100)
    category: MenuCategory
    price: Decimal = Field(..., gt=0)
    description: Optional[str] = None

    @field_validator('name')
    @classmethod
    def check_required(cls, v: str) -> str:
        return _required_text(v)


class MenuItemResponse(BaseModel):
    id: int
    name: str
    category: MenuCategory
    price: Decimal
    description: Optional[str] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class MenuResponse(BaseModel):
    breakfast: List[MenuItemResponse]
    menu: List[MenuItemResponse]


class FacilityCreate(BaseModel):
    name: str = Field(..., max_length=100)
    description: str
    icon: Optional[str] = Field(None, max_length=50)

    @field_validator('name', 'description')
    @classmethod
    def check_required(cls, v: str) -> str:
        return _required_text(v)


class FacilityResponse(BaseModel):
    id: int
    name: str
    description: str
    icon: Optional[str] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ============== 事件 Schemas ==============

class EventResponse(BaseModel):
    event_id: int
    event_type: str
    timestamp: datetime
    source: str
    data: Dict[str, Any]
