"""
Pytest 配置和共享 fixtures
"""
import os

# 测试期间不启动后台清洁扫描，也不写本地数据库文件
os.environ.setdefault("ENABLE_SCHEDULER", "false")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from datetime import date
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from hms.database import Base, get_db
from hms.models import ontology  # noqa
from hms.models.ontology import (
    User, UserRole, RoomType, Room, RoomStatus, Guest, BookingStatus, PaymentStatus
)
from hms.security.auth import get_password_hash, create_access_token
from hms.services.event_bus import event_bus
from hms.main import app


@pytest.fixture(scope="function")
def db_engine():
    """创建内存数据库引擎"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """创建数据库会话"""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(db_session):
    """创建测试客户端"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_event_bus():
    """每个用例使用干净的事件历史"""
    event_bus.clear_history()
    yield
    event_bus.clear_history()


# ============== 认证相关 Fixtures ==============

def _create_user(db_session, name, email, role):
    user = User(
        name=name,
        email=email,
        password_hash=get_password_hash("123456"),
        role=role,
        is_active=True
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def owner(db_session):
    """业主"""
    return _create_user(db_session, "业主", "owner@hotel.test", UserRole.OWNER)


@pytest.fixture
def manager(db_session):
    """经理"""
    return _create_user(db_session, "经理", "manager@hotel.test", UserRole.MANAGER)


@pytest.fixture
def staff(db_session):
    """员工"""
    return _create_user(db_session, "前台小王", "staff@hotel.test", UserRole.STAFF)


@pytest.fixture
def owner_auth_headers(owner):
    """返回业主认证的请求头"""
    return {"Authorization": f"Bearer {create_access_token(owner.id, owner.role)}"}


@pytest.fixture
def manager_auth_headers(manager):
    """返回经理认证的请求头"""
    return {"Authorization": f"Bearer {create_access_token(manager.id, manager.role)}"}


@pytest.fixture
def staff_auth_headers(staff):
    """返回员工认证的请求头"""
    return {"Authorization": f"Bearer {create_access_token(staff.id, staff.role)}"}


# ============== 实体相关 Fixtures ==============

@pytest.fixture
def sample_room_type(db_session):
    """创建测试房型"""
    room_type = RoomType(name="Deluxe")
    db_session.add(room_type)
    db_session.commit()
    db_session.refresh(room_type)
    return room_type


@pytest.fixture
def sample_room(db_session, sample_room_type):
    """房间 101，每晚 500,000"""
    room = Room(
        number="101",
        room_type_id=sample_room_type.id,
        price=Decimal("500000"),
        status=RoomStatus.AVAILABLE
    )
    db_session.add(room)
    db_session.commit()
    db_session.refresh(room)
    return room


@pytest.fixture
def sample_rooms(db_session, sample_room_type):
    """创建多个测试房间"""
    suite = RoomType(name="Suite")
    db_session.add(suite)
    db_session.commit()

    rooms = [
        Room(number="201", room_type_id=sample_room_type.id, price=Decimal("450000"),
             status=RoomStatus.AVAILABLE),
        Room(number="202", room_type_id=sample_room_type.id, price=Decimal("400000"),
             status=RoomStatus.AVAILABLE),
        Room(number="203", room_type_id=sample_room_type.id, price=Decimal("400000"),
             status=RoomStatus.OCCUPIED),
        Room(number="301", room_type_id=suite.id, price=Decimal("900000"),
             status=RoomStatus.AVAILABLE),
    ]
    db_session.add_all(rooms)
    db_session.commit()
    for room in rooms:
        db_session.refresh(room)
    return rooms


@pytest.fixture
def checked_in_booking(db_session, sample_room):
    """已入住的住客记录，房间为 occupied"""
    sample_room.status = RoomStatus.OCCUPIED
    sample_room.reservation_date = date(2024, 1, 10)
    sample_room.check_out_date = date(2024, 1, 12)
    booking = Guest(
        name="Budi",
        phone="0812000111",
        check_in=date(2024, 1, 10),
        check_out=date(2024, 1, 12),
        room_id=sample_room.id,
        nights=2,
        price_per_night=Decimal("500000"),
        total_price=Decimal("1000000"),
        payment_status=PaymentStatus.PAID,
        booking_status=BookingStatus.CHECKED_IN
    )
    db_session.add(booking)
    db_session.commit()
    db_session.refresh(booking)
    return booking


@pytest.fixture
def reservation_booking(db_session, sample_room):
    """预订中的住客记录，房间为 reserved"""
    sample_room.status = RoomStatus.RESERVED
    sample_room.reservation_date = date(2024, 1, 10)
    sample_room.check_out_date = date(2024, 1, 12)
    booking = Guest(
        name="Sari",
        phone="0812000222",
        check_in=date(2024, 1, 10),
        check_out=date(2024, 1, 12),
        room_id=sample_room.id,
        nights=2,
        price_per_night=Decimal("500000"),
        total_price=Decimal("1000000"),
        payment_status=PaymentStatus.UNPAID,
        booking_status=BookingStatus.RESERVATION
    )
    db_session.add(booking)
    db_session.commit()
    db_session.refresh(booking)
    return booking
