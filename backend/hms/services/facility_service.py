"""
酒店设施服务
"""
from typing import List, Callable
from datetime import datetime
from sqlalchemy.orm import Session
from hms.models.ontology import Facility
from hms.models.schemas import FacilityCreate
from hms.services.event_bus import event_bus, Event
from hms.models.events import EventType, EntityChangedData


class FacilityService:

    def __init__(self, db: Session, event_publisher: Callable[[Event], None] = None):
        self.db = db
        self._publish_event = event_publisher or event_bus.publish

    def get_facilities(self) -> List[Facility]:
        return self.db.query(Facility).order_by(Facility.created_at, Facility.id).all()

    def create_facility(self, data: FacilityCreate, operator_id: int = None) -> Facility:
        """新增设施，名称与描述必填"""
        name = (data.name or "").strip()
        description = (data.description or "").strip()
        if not name or not description:
            raise ValueError("设施名称和描述不能为空")

        facility = Facility(name=name, description=description, icon=data.icon)
        self.db.add(facility)
        self.db.commit()
        self.db.refresh(facility)

        self._publish_event(Event(
            event_type=EventType.FACILITY_CREATED,
            timestamp=datetime.now(),
            data=EntityChangedData(
                entity_type="facility",
                entity_id=facility.id,
                operator_id=operator_id,
                entities={"facility": [facility.id]}
            ).to_dict(),
            source="facility_service"
        ))
        return facility
