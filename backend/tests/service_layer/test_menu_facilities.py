"""
餐厅菜单与设施服务测试
"""
import pytest
from decimal import Decimal
from unittest.mock import MagicMock

from hms.models.ontology import MenuCategory
from hms.models.schemas import MenuItemCreate, FacilityCreate
from hms.services.menu_service import MenuService
from hms.services.facility_service import FacilityService


def test_menu_grouped_by_category(db_session):
    service = MenuService(db_session, event_publisher=MagicMock())
    service.create_item(MenuItemCreate(name="Nasi Goreng", category=MenuCategory.MENU, price=Decimal("45000")))
    service.create_item(MenuItemCreate(name="Bubur", category=MenuCategory.BREAKFAST, price=Decimal("25000")))
    service.create_item(MenuItemCreate(name="Omelette", category=MenuCategory.BREAKFAST, price=Decimal("30000")))

    menu = service.get_menu()
    assert [i.name for i in menu['breakfast']] == ["Bubur", "Omelette"]
    assert [i.name for i in menu['menu']] == ["Nasi Goreng"]


def test_menu_item_price_must_be_positive(db_session):
    service = MenuService(db_session, event_publisher=MagicMock())
    data = MenuItemCreate.model_construct(name="Air", category=MenuCategory.MENU, price=Decimal("0"))
    with pytest.raises(ValueError, match="价格"):
        service.create_item(data)


def test_create_facility(db_session):
    events = []
    service = FacilityService(db_session, event_publisher=events.append)
    facility = service.create_facility(FacilityCreate(name="Pool", description="Outdoor pool", icon="waves"))

    assert [f.id for f in service.get_facilities()] == [facility.id]
    assert events[0].data["entities"] == {"facility": [facility.id]}


def test_facility_requires_description(db_session):
    service = FacilityService(db_session, event_publisher=MagicMock())
    with pytest.raises(ValueError):
        service.create_facility(FacilityCreate.model_construct(name="Gym", description=" ", icon=None))
