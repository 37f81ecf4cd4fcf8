"""
领域事件定义 (Domain Events)
每个事件都携带受影响的实体 id，客户端据此做精确的缓存失效
"""
from enum import Enum
from dataclasses import dataclass, field, asdict
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, Dict, Any, List


class EventType(str, Enum):
    """事件类型枚举"""
    # 房间相关
    ROOM_CREATED = "room.created"
    ROOM_UPDATED = "room.updated"
    ROOM_DELETED = "room.deleted"
    ROOM_STATUS_CHANGED = "room.status_changed"
    ROOM_RELEASED = "room.released"
    ROOM_TYPE_CREATED = "room_type.created"

    # 住客相关
    BOOKING_CREATED = "booking.created"
    GUEST_CHECKED_OUT = "guest.checked_out"

    # 财务相关
    TRANSACTION_CREATED = "transaction.created"

    # 餐厅 / 设施
    MENU_ITEM_CREATED = "menu_item.created"
    FACILITY_CREATED = "facility.created"

    # 用户相关
    USER_CREATED = "user.created"
    USER_UPDATED = "user.updated"
    USER_DELETED = "user.deleted"
    ACTIVITY_RECORDED = "activity.recorded"


@dataclass
class BaseEventData:
    """事件数据基类"""
    timestamp: datetime = field(default_factory=datetime.now)
    # 受影响的实体：{"room": [1], "guest": [3]}
    entities: Dict[str, List[int]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        result = asdict(self)
        for key, value in result.items():
            if isinstance(value, (datetime, date)):
                result[key] = value.isoformat()
            elif isinstance(value, Decimal):
                result[key] = float(value)
        return result


@dataclass
class EntityChangedData(BaseEventData):
    """通用实体变更事件数据"""
    entity_type: str = ""
    entity_id: int = 0
    operator_id: Optional[int] = None


@dataclass
class RoomStatusChangedData(BaseEventData):
    """房间状态变更事件数据"""
    room_id: int = 0
    room_number: str = ""
    old_status: str = ""
    new_status: str = ""
    changed_by: Optional[int] = None
    reason: str = ""


@dataclass
class RoomReleasedData(BaseEventData):
    """清洁结束、房间释放事件数据"""
    room_id: int = 0
    room_number: str = ""
    released_at: datetime = field(default_factory=datetime.now)


@dataclass
class BookingCreatedData(BaseEventData):
    """新建预订 / 直接入住事件数据"""
    booking_id: int = 0
    guest_name: str = ""
    room_id: int = 0
    room_number: str = ""
    booking_status: str = ""
    check_in: str = ""   # date as string
    check_out: str = ""  # date as string
    total_price: float = 0.0
    transaction_id: Optional[int] = None
    operator_id: Optional[int] = None


@dataclass
class GuestCheckedOutData(BaseEventData):
    """客人退房事件数据"""
    booking_id: int = 0
    guest_name: str = ""
    room_id: Optional[int] = None
    room_number: str = ""
    available_at: Optional[datetime] = None
    operator_id: Optional[int] = None


@dataclass
class TransactionCreatedData(BaseEventData):
    """财务流水新增事件数据"""
    transaction_id: int = 0
    type: str = ""
    amount: float = 0.0
    category: str = ""
    date: str = ""


# 事件数据类型映射
EVENT_DATA_CLASSES = {
    EventType.ROOM_STATUS_CHANGED: RoomStatusChangedData,
    EventType.ROOM_RELEASED: RoomReleasedData,
    EventType.BOOKING_CREATED: BookingCreatedData,
    EventType.GUEST_CHECKED_OUT: GuestCheckedOutData,
    EventType.TRANSACTION_CREATED: TransactionCreatedData,
}
