"""
退房服务 - 本体操作层
退房：住客 -> checked-out，房间 -> cleaning，并写入清洁结束时间 available_at
释放：定时扫描把到期的 cleaning 房间恢复为 available 并清空日期
清洁计划保存在房间行上，服务重启或客户端断开都不会丢失
"""
from typing import Optional, Callable, List
from datetime import datetime, timedelta
import logging
from sqlalchemy.orm import Session
from hms.config import settings
from hms.domain import lifecycle
from hms.models.ontology import Guest, Room, RoomStatus, BookingStatus, User
from hms.services.activity_service import ActivityService
from hms.services.event_bus import event_bus, Event
from hms.models.events import EventType, GuestCheckedOutData, RoomReleasedData

logger = logging.getLogger(__name__)


class CheckOutService:
    """退房服务"""

    def __init__(self, db: Session, event_publisher: Callable[[Event], None] = None,
                 clock: Callable[[], datetime] = None, cleaning_delay_seconds: Optional[int] = None):
        self.db = db
        # 支持依赖注入事件发布器与时钟，便于测试
        self._publish_event = event_publisher or event_bus.publish
        self._now = clock or datetime.now
        if cleaning_delay_seconds is None:
            cleaning_delay_seconds = settings.CLEANING_DELAY_SECONDS
        self.cleaning_delay = timedelta(seconds=cleaning_delay_seconds)

    def check_out(self, booking_id: int, operator: Optional[User] = None) -> Guest:
        """
        退房操作

        前置条件：住客记录必须为 checked-in，否则拒绝且不写入任何数据
        业务联动（单事务）：
        1. 住客记录 -> checked-out
        2. 房间 -> cleaning，available_at = 当前时间 + 清洁缓冲
        """
        booking = self.db.query(Guest).filter(Guest.id == booking_id).first()
        if not booking:
            raise ValueError("住客记录不存在")

        try:
            lifecycle.ensure_can_check_out(booking)
        except lifecycle.BookingStateError:
            logger.warning(
                f"Checkout refused for booking {booking.id}: status {booking.booking_status.value}"
            )
            raise

        room = None
        if booking.room_id is not None:
            room = self.db.query(Room).filter(Room.id == booking.room_id).with_for_update().first()

        available_at = None
        try:
            booking.booking_status = BookingStatus.CHECKED_OUT
            if room:
                available_at = self._now() + self.cleaning_delay
                room.status = RoomStatus.CLEANING
                room.available_at = available_at
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception(f"Checkout of booking {booking_id} failed, rolled back")
            raise

        self.db.refresh(booking)
        room_number = room.number if room else ""
        logger.info(
            f"Booking {booking.id} checked out, room {room_number or '-'} cleaning until {available_at}"
        )

        entities = {"guest": [booking.id]}
        if room:
            entities["room"] = [room.id]
        self._publish_event(Event(
            event_type=EventType.GUEST_CHECKED_OUT,
            timestamp=datetime.now(),
            data=GuestCheckedOutData(
                booking_id=booking.id,
                guest_name=booking.name,
                room_id=room.id if room else None,
                room_number=room_number,
                available_at=available_at,
                operator_id=operator.id if operator else None,
                entities=entities
            ).to_dict(),
            source="checkout_service"
        ))

        if operator:
            ActivityService(self.db, self._publish_event).record_safely(
                operator.id, f"住客 {booking.name} 退房，房间 {room_number or '-'} 进入清洁"
            )
        return booking

    def get_pending_releases(self) -> List[Room]:
        """已排定释放时间的清洁中房间"""
        return self.db.query(Room).filter(
            Room.status == RoomStatus.CLEANING,
            Room.available_at.isnot(None)
        ).order_by(Room.available_at).all()

    def release_cleaned_rooms(self, now: Optional[datetime] = None) -> List[Room]:
        """
        释放清洁到期的房间

        cleaning 且 available_at <= now 的房间 -> available，清空入住/离店日期与 available_at。
        没有 available_at 的 cleaning 房间（手动设置）保持不变。
        """
        now = now or self._now()
        rooms = self.db.query(Room).filter(
            Room.status == RoomStatus.CLEANING,
            Room.available_at.isnot(None),
            Room.available_at <= now
        ).all()
        if not rooms:
            return []

        try:
            for room in rooms:
                room.status = RoomStatus.AVAILABLE
                room.reservation_date = None
                room.check_out_date = None
                room.available_at = None
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception("Releasing cleaned rooms failed, rooms stay in cleaning")
            raise

        for room in rooms:
            logger.info(f"Room {room.number} released after cleaning")
            self._publish_event(Event(
                event_type=EventType.ROOM_RELEASED,
                timestamp=datetime.now(),
                data=RoomReleasedData(
                    room_id=room.id,
                    room_number=room.number,
                    released_at=now,
                    entities={"room": [room.id]}
                ).to_dict(),
                source="checkout_service"
            ))
        return rooms

    def get_today_expected_checkouts(self) -> List[Guest]:
        """今日预计退房（已入住且离店日为今天）"""
        today = self._now().date()
        return self.db.query(Guest).filter(
            Guest.booking_status == BookingStatus.CHECKED_IN,
            Guest.check_out == today
        ).all()

    def get_overdue_stays(self) -> List[Guest]:
        """逾期未退房"""
        today = self._now().date()
        return self.db.query(Guest).filter(
            Guest.booking_status == BookingStatus.CHECKED_IN,
            Guest.check_out < today
        ).all()
