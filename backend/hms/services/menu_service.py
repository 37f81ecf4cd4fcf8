"""
餐厅菜单服务
"""
from typing import List, Callable
from datetime import datetime
import logging
from sqlalchemy.orm import Session
from hms.domain.lifecycle import to_price
from hms.models.ontology import MenuItem, MenuCategory
from hms.models.schemas import MenuItemCreate
from hms.services.event_bus import event_bus, Event
from hms.models.events import EventType, EntityChangedData

logger = logging.getLogger(__name__)


class MenuService:
    """餐厅菜单服务"""

    def __init__(self, db: Session, event_publisher: Callable[[Event], None] = None):
        self.db = db
        self._publish_event = event_publisher or event_bus.publish

    def get_items(self) -> List[MenuItem]:
        """按分类、创建时间排序的菜品"""
        return self.db.query(MenuItem).order_by(
            MenuItem.category, MenuItem.created_at, MenuItem.id
        ).all()

    def get_menu(self) -> dict:
        """按早餐 / 菜单分组"""
        grouped = {category.value: [] for category in MenuCategory}
        for item in self.get_items():
            grouped[item.category.value].append(item)
        return grouped

    def create_item(self, data: MenuItemCreate, operator_id: int = None) -> MenuItem:
        """新增菜品：名称必填，价格为正"""
        name = (data.name or "").strip()
        if not name:
            raise ValueError("菜品名称不能为空")
        price = to_price(data.price)
        if price <= 0:
            raise ValueError("价格必须大于 0")

        item = MenuItem(
            name=name,
            category=data.category,
            price=price,
            description=(data.description or "").strip() or None
        )
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)

        logger.info(f"Menu item {item.id} '{item.name}' added to {item.category.value}")
        self._publish_event(Event(
            event_type=EventType.MENU_ITEM_CREATED,
            timestamp=datetime.now(),
            data=EntityChangedData(
                entity_type="menu_item",
                entity_id=item.id,
                operator_id=operator_id,
                entities={"menu_item": [item.id]}
            ).to_dict(),
            source="menu_service"
        ))
        return item
