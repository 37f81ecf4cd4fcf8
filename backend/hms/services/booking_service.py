"""
住客预订服务 - 本体操作层
新建预订 / 直接入住 / 预订到店，均在单个数据库事务内完成：
住客记录、房间状态与日期、客房收入流水要么全部生效，要么全部回滚
"""
from typing import List, Optional, Callable
from datetime import date, datetime
import logging
from sqlalchemy import or_, func
from sqlalchemy.orm import Session, joinedload
from hms.config import settings
from hms.domain import lifecycle
from hms.domain.lifecycle import BookingStateError
from hms.models.ontology import (
    Guest, Room, RoomStatus, BookingStatus, Transaction, TransactionType, User
)
from hms.models.schemas import BookingCreate
from hms.services.activity_service import ActivityService
from hms.services.event_bus import event_bus, Event
from hms.models.events import EventType, BookingCreatedData, RoomStatusChangedData

logger = logging.getLogger(__name__)


class BookingService:
    """住客预订服务"""

    def __init__(self, db: Session, event_publisher: Callable[[Event], None] = None):
        self.db = db
        self._publish_event = event_publisher or event_bus.publish

    # ============== 查询 ==============

    def _base_query(self):
        return self.db.query(Guest).options(
            joinedload(Guest.room).joinedload(Room.room_type),
            joinedload(Guest.receiver)
        )

    def get_booking(self, booking_id: int) -> Optional[Guest]:
        """获取单条住客记录"""
        return self.db.query(Guest).filter(Guest.id == booking_id).first()

    def get_bookings(self, search: Optional[str] = None,
                     booking_status: Optional[BookingStatus] = None) -> List[Guest]:
        """
        住客列表（最新在前）

        search 对姓名、房间号、邮箱、电话做不区分大小写的匹配
        """
        query = self._base_query().outerjoin(Room, Guest.room_id == Room.id)

        if booking_status is not None:
            query = query.filter(Guest.booking_status == booking_status)

        term = (search or "").strip().lower()
        if term:
            pattern = f"%{term}%"
            query = query.filter(or_(
                func.lower(Guest.name).like(pattern),
                func.lower(Room.number).like(pattern),
                func.lower(func.coalesce(Guest.email, "")).like(pattern),
                func.lower(Guest.phone).like(pattern)
            ))

        return query.order_by(Guest.created_at.desc(), Guest.id.desc()).all()

    def get_recent_bookings(self, limit: int = 5) -> List[Guest]:
        """最近登记的住客"""
        return self._base_query().order_by(
            Guest.created_at.desc(), Guest.id.desc()
        ).limit(limit).all()

    def get_booking_detail(self, booking: Guest) -> dict:
        """住客记录详情（含房间与接待人）"""
        room = booking.room
        return {
            'id': booking.id,
            'name': booking.name,
            'phone': booking.phone,
            'email': booking.email,
            'check_in': booking.check_in,
            'check_out': booking.check_out,
            'room_id': booking.room_id,
            'room_number': room.number if room else None,
            'room_type_name': room.type_name if room else None,
            'nights': booking.nights,
            'price_per_night': booking.price_per_night,
            'total_price': booking.total_price,
            'payment_method': booking.payment_method,
            'payment_status': booking.payment_status,
            'booking_status': booking.booking_status,
            'received_by': booking.received_by,
            'received_by_name': booking.receiver.name if booking.receiver else None,
            'created_at': booking.created_at
        }

    def quote(self, room_id: int, check_in: date, check_out: date) -> lifecycle.StayQuote:
        """按房间当前价格报价"""
        room = self.db.query(Room).filter(Room.id == room_id).first()
        if not room:
            raise ValueError("房间不存在")
        return lifecycle.calculate_stay(check_in, check_out, room.price)

    # ============== 新建预订 ==============

    def _lock_room(self, room_id: int) -> Optional[Room]:
        """事务内重新读取房间（支持的数据库上加行锁）"""
        return self.db.query(Room).filter(Room.id == room_id).with_for_update().first()

    def _post_room_revenue(self, booking: Guest, room: Room) -> Transaction:
        transaction = Transaction(
            type=TransactionType.INCOME,
            amount=booking.total_price,
            category=settings.ROOM_REVENUE_CATEGORY,
            description=f"房费 {room.type_name} • 房间 {room.number}",
            date=booking.check_in
        )
        self.db.add(transaction)
        self.db.flush()
        return transaction

    def create_booking(self, data: BookingCreate, operator: Optional[User] = None) -> Guest:
        """
        新建预订或直接入住

        前置校验（任何写入之前）：
        1. 已选择房型
        2. 已选择该房型下存储状态为 available 的房间
        3. 入住晚数 > 0
        4. 姓名、电话不能为空

        事务内依次：插入住客记录 -> 更新房间状态与日期 -> 入住且金额 > 0 时记客房收入
        """
        if data.room_type_id is None:
            raise ValueError("请先选择房型")
        if data.room_id is None:
            raise ValueError("请选择可售的房间")
        if not (data.name or "").strip() or not (data.phone or "").strip():
            raise ValueError("姓名和电话不能为空")

        target_room_status = lifecycle.room_status_for_booking(data.booking_status)

        room = self._lock_room(data.room_id)
        if not room:
            raise ValueError("房间不存在")
        if room.room_type_id != data.room_type_id:
            raise ValueError("所选房间不属于该房型")
        if not lifecycle.is_offerable(room):
            raise BookingStateError(f"房间 {room.number} 当前状态为 {room.status.value}，不可预订")

        quote = lifecycle.calculate_stay(data.check_in, data.check_out, room.price)
        if not quote.is_bookable:
            raise ValueError("离店日期必须晚于入住日期")

        operator_id = operator.id if operator else None
        old_status = room.status
        try:
            booking = Guest(
                name=data.name.strip(),
                phone=data.phone.strip(),
                email=(data.email or "").strip() or None,
                check_in=data.check_in,
                check_out=data.check_out,
                room_id=room.id,
                nights=quote.nights,
                price_per_night=quote.price_per_night,
                total_price=quote.total_price,
                payment_method=data.payment_method,
                payment_status=data.payment_status,
                booking_status=data.booking_status,
                received_by=operator_id
            )
            self.db.add(booking)
            self.db.flush()

            room.reservation_date = data.check_in
            room.check_out_date = data.check_out
            room.status = target_room_status
            room.available_at = None

            transaction = None
            if data.booking_status == BookingStatus.CHECKED_IN and quote.total_price > 0:
                transaction = self._post_room_revenue(booking, room)

            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception(f"Create booking for room {room.number} failed, rolled back")
            raise

        self.db.refresh(booking)
        logger.info(
            f"Booking {booking.id} created: room {room.number} "
            f"{booking.booking_status.value}, {quote.nights} nights, total {quote.total_price}"
        )

        self._publish_created(booking, room, old_status, transaction, operator_id)
        if operator:
            label = "入住" if booking.booking_status == BookingStatus.CHECKED_IN else "预订"
            ActivityService(self.db, self._publish_event).record_safely(
                operator.id,
                f"接待住客 {booking.name}（{label}），房间 {room.number} • {room.type_name}"
            )
        return booking

    # ============== 预订到店 ==============

    def check_in_reservation(self, booking_id: int, operator: Optional[User] = None) -> Guest:
        """
        预订到店入住：reservation -> checked-in

        房间转为 occupied，金额 > 0 时补记客房收入，单事务完成
        """
        booking = self.get_booking(booking_id)
        if not booking:
            raise ValueError("住客记录不存在")
        lifecycle.ensure_transition(booking.booking_status, BookingStatus.CHECKED_IN)

        room = self._lock_room(booking.room_id)
        if room and room.status == RoomStatus.CLEANING:
            raise BookingStateError(f"房间 {room.number} 正在清洁，暂不能入住")

        operator_id = operator.id if operator else None
        old_status = room.status if room else None
        try:
            booking.booking_status = BookingStatus.CHECKED_IN
            transaction = None
            if room:
                room.status = RoomStatus.OCCUPIED
                room.reservation_date = booking.check_in
                room.check_out_date = booking.check_out
                if booking.total_price > 0:
                    transaction = self._post_room_revenue(booking, room)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception(f"Check-in of booking {booking_id} failed, rolled back")
            raise

        self.db.refresh(booking)
        logger.info(f"Booking {booking.id} checked in")

        if room:
            self._publish_event(Event(
                event_type=EventType.ROOM_STATUS_CHANGED,
                timestamp=datetime.now(),
                data=RoomStatusChangedData(
                    room_id=room.id,
                    room_number=room.number,
                    old_status=old_status.value if old_status else "",
                    new_status=RoomStatus.OCCUPIED.value,
                    changed_by=operator_id,
                    reason="check_in",
                    entities={
                        "room": [room.id],
                        "guest": [booking.id],
                        "transaction": [transaction.id] if transaction else []
                    }
                ).to_dict(),
                source="booking_service"
            ))
        if operator:
            room_label = room.number if room else "-"
            ActivityService(self.db, self._publish_event).record_safely(
                operator.id, f"住客 {booking.name} 办理入住，房间 {room_label}"
            )
        return booking

    def _publish_created(self, booking: Guest, room: Room, old_status: RoomStatus,
                         transaction: Optional[Transaction], operator_id: Optional[int]) -> None:
        entities = {"guest": [booking.id], "room": [room.id]}
        if transaction:
            entities["transaction"] = [transaction.id]

        self._publish_event(Event(
            event_type=EventType.BOOKING_CREATED,
            timestamp=datetime.now(),
            data=BookingCreatedData(
                booking_id=booking.id,
                guest_name=booking.name,
                room_id=room.id,
                room_number=room.number,
                booking_status=booking.booking_status.value,
                check_in=booking.check_in.isoformat(),
                check_out=booking.check_out.isoformat(),
                total_price=float(booking.total_price),
                transaction_id=transaction.id if transaction else None,
                operator_id=operator_id,
                entities=entities
            ).to_dict(),
            source="booking_service"
        ))

        if old_status != room.status:
            self._publish_event(Event(
                event_type=EventType.ROOM_STATUS_CHANGED,
                timestamp=datetime.now(),
                data=RoomStatusChangedData(
                    room_id=room.id,
                    room_number=room.number,
                    old_status=old_status.value,
                    new_status=room.status.value,
                    changed_by=operator_id,
                    reason="booking",
                    entities={"room": [room.id]}
                ).to_dict(),
                source="booking_service"
            ))
