"""
初始化数据脚本
创建：房型、房间、业主账号、餐厅菜单、酒店设施

默认账号（密码 123456）：
  owner@hotel.local    业主

用法：
  cd backend && python init_data.py
"""
from decimal import Decimal
from hms.database import SessionLocal, init_db
from hms.models.ontology import (
    RoomType, Room, RoomStatus, User, UserRole, MenuItem, MenuCategory, Facility
)
from hms.security.auth import get_password_hash


def init_room_types(db):
    """初始化房型"""
    room_types = {}
    for name in ("Standard", "Deluxe", "Suite"):
        room_type = db.query(RoomType).filter(RoomType.name == name).first()
        if not room_type:
            room_type = RoomType(name=name)
            db.add(room_type)
            db.flush()
        room_types[name] = room_type
    print(f"房型: {', '.join(room_types)}")
    return room_types


def init_rooms(db, room_types):
    """初始化房间 - 1F 标准间、2F 豪华间、3F 套房"""
    floors = {
        1: ("Standard", Decimal("350000")),
        2: ("Deluxe", Decimal("500000")),
        3: ("Suite", Decimal("900000")),
    }
    created = 0
    for floor, (type_name, price) in floors.items():
        for i in range(1, 6):
            number = f"{floor}0{i}"
            if db.query(Room).filter(Room.number == number).first():
                continue
            db.add(Room(
                number=number,
                room_type_id=room_types[type_name].id,
                price=price,
                status=RoomStatus.AVAILABLE
            ))
            created += 1
    print(f"房间: 新增 {created} 间")


def init_owner(db):
    """初始化业主账号"""
    email = "owner@hotel.local"
    if db.query(User).filter(User.email == email).first():
        return
    db.add(User(
        name="Owner",
        email=email,
        password_hash=get_password_hash("123456"),
        role=UserRole.OWNER
    ))
    print(f"业主账号: {email}")


def init_menu(db):
    """初始化餐厅菜单"""
    if db.query(MenuItem).count() > 0:
        return
    items = [
        ("Nasi Uduk", MenuCategory.BREAKFAST, Decimal("35000"), "椰浆饭配炸鸡"),
        ("Continental Breakfast", MenuCategory.BREAKFAST, Decimal("60000"), None),
        ("Nasi Goreng", MenuCategory.MENU, Decimal("45000"), "招牌炒饭"),
        ("Sate Ayam", MenuCategory.MENU, Decimal("50000"), None),
    ]
    for name, category, price, description in items:
        db.add(MenuItem(name=name, category=category, price=price, description=description))
    print(f"菜单: {len(items)} 道")


def init_facilities(db):
    """初始化酒店设施"""
    if db.query(Facility).count() > 0:
        return
    facilities = [
        ("Swimming Pool", "室外泳池，07:00-21:00 开放", "waves"),
        ("Free WiFi", "全酒店覆盖", "wifi"),
        ("Parking", "免费停车场", "car"),
    ]
    for name, description, icon in facilities:
        db.add(Facility(name=name, description=description, icon=icon))
    print(f"设施: {len(facilities)} 项")


def main():
    """主函数"""
    print("=" * 50)
    print("HMS 初始化数据")
    print("=" * 50)

    init_db()
    print("数据库表创建完成")

    db = SessionLocal()
    try:
        room_types = init_room_types(db)
        init_rooms(db, room_types)
        init_owner(db)
        init_menu(db)
        init_facilities(db)
        db.commit()
        print("初始化完成！")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == '__main__':
    main()
