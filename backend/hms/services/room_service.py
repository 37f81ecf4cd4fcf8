"""
房间服务 - 本体操作层
管理 Room 和 RoomType 对象，提供可售房间与房态看板
"""
from typing import List, Optional, Callable
from datetime import date, datetime
import logging
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload
from hms.domain import lifecycle
from hms.models.ontology import Room, RoomType, RoomStatus, Guest
from hms.models.schemas import RoomCreate, RoomUpdate, RoomTypeCreate
from hms.services.event_bus import event_bus, Event
from hms.models.events import EventType, EntityChangedData, RoomStatusChangedData

logger = logging.getLogger(__name__)


class RoomService:
    """房间服务"""

    def __init__(self, db: Session, event_publisher: Callable[[Event], None] = None):
        self.db = db
        # 支持依赖注入事件发布器，便于测试
        self._publish_event = event_publisher or event_bus.publish

    def _publish_entity_event(self, event_type: EventType, entity_type: str, entity_id: int,
                              operator_id: Optional[int] = None) -> None:
        self._publish_event(Event(
            event_type=event_type,
            timestamp=datetime.now(),
            data=EntityChangedData(
                entity_type=entity_type,
                entity_id=entity_id,
                operator_id=operator_id,
                entities={entity_type: [entity_id]}
            ).to_dict(),
            source="room_service"
        ))

    # ============== 房型操作 ==============

    def get_room_types(self) -> List[RoomType]:
        """获取所有房型"""
        return self.db.query(RoomType).order_by(RoomType.name).all()

    def get_room_type(self, room_type_id: int) -> Optional[RoomType]:
        """获取单个房型"""
        return self.db.query(RoomType).filter(RoomType.id == room_type_id).first()

    def create_room_type(self, data: RoomTypeCreate, operator_id: Optional[int] = None) -> RoomType:
        """创建房型，名称不区分大小写唯一"""
        name = data.name.strip()
        if not name:
            raise ValueError("房型名称不能为空")

        existing = self.db.query(RoomType).filter(
            func.lower(RoomType.name) == name.lower()
        ).first()
        if existing:
            raise ValueError(f"房型 '{name}' 已存在")

        room_type = RoomType(name=name)
        self.db.add(room_type)
        self.db.commit()
        self.db.refresh(room_type)

        self._publish_entity_event(EventType.ROOM_TYPE_CREATED, "room_type", room_type.id, operator_id)
        return room_type

    def get_room_type_with_count(self, room_type_id: int) -> Optional[dict]:
        """获取房型及房间数量"""
        room_type = self.get_room_type(room_type_id)
        if not room_type:
            return None

        room_count = self.db.query(Room).filter(Room.room_type_id == room_type_id).count()
        return {
            'id': room_type.id,
            'name': room_type.name,
            'created_at': room_type.created_at,
            'room_count': room_count
        }

    # ============== 房间操作 ==============

    def get_rooms(self, room_type_id: Optional[int] = None,
                  status: Optional[RoomStatus] = None) -> List[Room]:
        """获取房间列表（按房间号）"""
        query = self.db.query(Room).options(joinedload(Room.room_type))

        if room_type_id is not None:
            query = query.filter(Room.room_type_id == room_type_id)
        if status is not None:
            query = query.filter(Room.status == status)

        return query.order_by(Room.number).all()

    def get_room(self, room_id: int) -> Optional[Room]:
        """获取单个房间"""
        return self.db.query(Room).filter(Room.id == room_id).first()

    def get_room_by_number(self, number: str) -> Optional[Room]:
        """根据房间号获取房间"""
        return self.db.query(Room).filter(Room.number == number).first()

    def create_room(self, data: RoomCreate, operator_id: Optional[int] = None) -> Room:
        """创建房间，初始状态为 available"""
        number = data.number.strip()
        if not number:
            raise ValueError("房间号不能为空")
        if self.get_room_by_number(number):
            raise ValueError(f"房间号 '{number}' 已存在")
        if not self.get_room_type(data.room_type_id):
            raise ValueError("房型不存在")

        room = Room(
            number=number,
            room_type_id=data.room_type_id,
            price=lifecycle.to_price(data.price),
            status=RoomStatus.AVAILABLE
        )
        self.db.add(room)
        self.db.commit()
        self.db.refresh(room)

        logger.info(f"Room {room.number} created")
        self._publish_entity_event(EventType.ROOM_CREATED, "room", room.id, operator_id)
        return room

    def update_room(self, room_id: int, data: RoomUpdate, operator_id: Optional[int] = None) -> Room:
        """更新房间号 / 房型 / 价格"""
        room = self.get_room(room_id)
        if not room:
            raise ValueError("房间不存在")

        update_data = data.model_dump(exclude_unset=True)

        if 'number' in update_data:
            number = (update_data['number'] or "").strip()
            if not number:
                raise ValueError("房间号不能为空")
            existing = self.get_room_by_number(number)
            if existing and existing.id != room_id:
                raise ValueError(f"房间号 '{number}' 已存在")
            update_data['number'] = number

        if 'room_type_id' in update_data:
            if not self.get_room_type(update_data['room_type_id']):
                raise ValueError("房型不存在")

        if 'price' in update_data:
            if update_data['price'] is None:
                raise ValueError("价格不能为空")
            update_data['price'] = lifecycle.to_price(update_data['price'])

        for key, value in update_data.items():
            setattr(room, key, value)

        self.db.commit()
        self.db.refresh(room)

        self._publish_entity_event(EventType.ROOM_UPDATED, "room", room.id, operator_id)
        return room

    def delete_room(self, room_id: int, operator_id: Optional[int] = None) -> bool:
        """删除房间，已有住客记录的房间不可删除"""
        room = self.get_room(room_id)
        if not room:
            raise ValueError("房间不存在")

        booking_count = self.db.query(Guest).filter(Guest.room_id == room_id).count()
        if booking_count > 0:
            raise ValueError(f"房间 {room.number} 有 {booking_count} 条住客记录，无法删除")

        self.db.delete(room)
        self.db.commit()

        self._publish_entity_event(EventType.ROOM_DELETED, "room", room_id, operator_id)
        return True

    def update_room_status(self, room_id: int, status: RoomStatus,
                           changed_by: int = None, reason: str = "") -> Room:
        """
        手动更新房间状态

        存储状态只是提示值，任何状态之间都允许手动切换；
        手动设置会取消尚未到期的清洁释放计划。
        """
        room = self.get_room(room_id)
        if not room:
            raise ValueError("房间不存在")

        old_status = room.status
        room.status = status
        room.available_at = None

        self.db.commit()
        self.db.refresh(room)

        if old_status != status:
            logger.info(f"Room {room.number} status {old_status.value} -> {status.value} (manual)")
            self._publish_event(Event(
                event_type=EventType.ROOM_STATUS_CHANGED,
                timestamp=datetime.now(),
                data=RoomStatusChangedData(
                    room_id=room.id,
                    room_number=room.number,
                    old_status=old_status.value,
                    new_status=status.value,
                    changed_by=changed_by,
                    reason=reason or "manual",
                    entities={"room": [room.id]}
                ).to_dict(),
                source="room_service"
            ))

        return room

    # ============== 可售房间 / 房态看板 ==============

    def get_availability(self, room_type_id: Optional[int] = None,
                         check_in: Optional[date] = None,
                         check_out: Optional[date] = None) -> dict:
        """
        可售房间查询

        房型选项基于全部可售房间；房间列表按房型过滤。
        给定入住区间时附带与之重叠的在住/预订记录 id。
        """
        rooms = self.db.query(Room).options(joinedload(Room.room_type)).order_by(Room.id).all()
        bookings = []
        if check_in is not None and check_out is not None:
            bookings = self.db.query(Guest).filter(
                Guest.booking_status.in_(lifecycle.ACTIVE_BOOKING_STATUSES),
                Guest.check_in < check_out,
                Guest.check_out > check_in
            ).all()

        return {
            'room_types': lifecycle.room_type_options(rooms),
            'rooms': lifecycle.available_rooms(
                rooms, room_type_id, bookings, check_in, check_out
            ),
        }

    def get_status_board(self, on_date: Optional[date]) -> List[lifecycle.RoomStatusView]:
        """指定日期的房态看板（只读）"""
        rooms = self.get_rooms()
        bookings = []
        if on_date is not None:
            bookings = self.db.query(Guest).filter(
                Guest.check_in <= on_date,
                Guest.check_out >= on_date
            ).all()
        return lifecycle.build_status_board(rooms, bookings, on_date)

    def get_room_status_summary(self) -> dict:
        """按存储状态统计房间数量"""
        rooms = self.db.query(Room).all()
        summary = {s.value: 0 for s in RoomStatus}
        for room in rooms:
            summary[room.status.value] += 1
        summary['total'] = len(rooms)
        return summary
