"""
本体对象定义 (Ontology Objects)
客房、房型、住客预订、财务流水、用户与活动记录
"""
from datetime import datetime
from enum import Enum
from sqlalchemy import (
    Column, Integer, String, DateTime, Date,
    ForeignKey, Text, Enum as SQLEnum, Boolean, Numeric
)
from sqlalchemy.orm import relationship
from hms.database import Base


# ============== 枚举定义 ==============

class RoomStatus(str, Enum):
    """房间状态枚举（前台可手动设置）"""
    AVAILABLE = "available"    # 空闲可售
    RESERVED = "reserved"      # 已预订
    OCCUPIED = "occupied"      # 入住中
    CLEANING = "cleaning"      # 清洁中


class BookingStatus(str, Enum):
    """住客预订状态"""
    RESERVATION = "reservation"  # 预订
    CHECKED_IN = "checked-in"    # 已入住
    CHECKED_OUT = "checked-out"  # 已退房


class PaymentStatus(str, Enum):
    """付款状态"""
    PAID = "paid"
    UNPAID = "unpaid"


class TransactionType(str, Enum):
    """流水类型"""
    INCOME = "income"
    EXPENSE = "expense"


class UserRole(str, Enum):
    """用户角色"""
    OWNER = "owner"        # 业主
    MANAGER = "manager"    # 经理
    STAFF = "staff"        # 员工


class MenuCategory(str, Enum):
    """菜单分类"""
    BREAKFAST = "breakfast"  # 早餐
    MENU = "menu"            # 正餐菜单


# ============== 本体对象定义 ==============

class RoomType(Base):
    """房型对象 - 仅用于分组与价格展示"""
    __tablename__ = "room_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    rooms = relationship("Room", back_populates="room_type")


class Room(Base):
    """
    房间对象
    status 是前台维护的提示值，按日期推导的展示状态见 hms.domain.lifecycle
    """
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    number = Column(String(10), unique=True, nullable=False)         # 房间号
    room_type_id = Column(Integer, ForeignKey("room_types.id"), nullable=True)
    price = Column(Numeric(14, 2), nullable=False)                   # 每晚价格
    status = Column(SQLEnum(RoomStatus), default=RoomStatus.AVAILABLE, nullable=False)
    reservation_date = Column(Date)                                  # 当前预订入住日
    check_out_date = Column(Date)                                    # 当前预订离店日
    available_at = Column(DateTime)                                  # 清洁结束时间，到期自动释放
    created_at = Column(DateTime, default=datetime.utcnow)

    room_type = relationship("RoomType", back_populates="rooms")
    bookings = relationship("Guest", back_populates="room")

    @property
    def type_name(self) -> str:
        return self.room_type.name if self.room_type else "-"


class Guest(Base):
    """
    住客预订对象 - 一次入住一条记录
    创建后只允许推进 booking_status
    """
    __tablename__ = "guests"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    phone = Column(String(30), nullable=False)
    email = Column(String(100))
    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False)
    nights = Column(Integer, nullable=False)
    price_per_night = Column(Numeric(14, 2), nullable=False)         # 下单时的房价快照
    total_price = Column(Numeric(14, 2), nullable=False)
    payment_method = Column(String(30))
    payment_status = Column(SQLEnum(PaymentStatus), default=PaymentStatus.UNPAID)
    booking_status = Column(SQLEnum(BookingStatus), nullable=False)
    received_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    room = relationship("Room", back_populates="bookings")
    receiver = relationship("User", foreign_keys=[received_by])


class Transaction(Base):
    """财务流水对象"""
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(SQLEnum(TransactionType), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    description = Column(Text, nullable=False)
    date = Column(Date, nullable=False)
    category = Column(String(50), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class User(Base):
    """
    用户对象（员工档案）
    角色权限：owner > manager > staff
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.STAFF)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    activities = relationship(
        "UserActivity", back_populates="user", cascade="all, delete-orphan"
    )


class UserActivity(Base):
    """用户活动记录 - 只追加"""
    __tablename__ = "user_activities"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="activities")


class MenuItem(Base):
    """餐厅菜单项"""
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    category = Column(SQLEnum(MenuCategory), nullable=False)
    price = Column(Numeric(14, 2), nullable=False)
    description = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)


class Facility(Base):
    """酒店设施"""
    __tablename__ = "facilities"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    icon = Column(String(50))
    created_at = Column(DateTime, default=datetime.utcnow)
