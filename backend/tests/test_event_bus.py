"""
事件总线单元测试
"""
import pytest
import threading
from datetime import datetime

from hms.services.event_bus import EventBus, Event
from hms.models.events import EventType, RoomReleasedData, BookingCreatedData


class TestEventBus:
    """事件总线测试"""

    @pytest.fixture
    def event_bus(self):
        """创建新的事件总线实例"""
        bus = EventBus()
        bus.clear_history()
        return bus

    @pytest.fixture
    def sample_event(self):
        """创建示例事件"""
        return Event(
            event_type="test.event",
            timestamp=datetime.now(),
            data={"key": "value"},
            source="test"
        )

    def test_singleton(self):
        assert EventBus() is EventBus()

    def test_publish_assigns_event_id(self, event_bus, sample_event):
        """发布时分配序号"""
        assert sample_event.event_id == 0
        published = event_bus.publish(sample_event)

        assert published is sample_event
        assert sample_event.event_id > 0
        assert event_bus.get_since(0) == [sample_event]

    def test_event_ids_increase(self, event_bus):
        first = event_bus.publish(Event(event_type="a", timestamp=datetime.now(), data={}, source="test"))
        second = event_bus.publish(Event(event_type="b", timestamp=datetime.now(), data={}, source="test"))
        assert second.event_id == first.event_id + 1

    def test_get_since(self, event_bus):
        """按序号增量读取"""
        events = [
            event_bus.publish(Event(event_type=f"e{i}", timestamp=datetime.now(), data={}, source="test"))
            for i in range(3)
        ]

        since = event_bus.get_since(events[0].event_id)
        assert [e.event_type for e in since] == ["e1", "e2"]
        assert event_bus.get_since(events[-1].event_id) == []
        assert len(event_bus.get_since(0, limit=2)) == 2

    def test_ids_continue_after_clear_history(self, event_bus):
        first = event_bus.publish(Event(event_type="a", timestamp=datetime.now(), data={}, source="test"))
        event_bus.clear_history()
        second = event_bus.publish(Event(event_type="b", timestamp=datetime.now(), data={}, source="test"))
        assert second.event_id > first.event_id
        assert event_bus.get_since(first.event_id) == [second]

    def test_concurrent_publish_and_poll(self, event_bus):
        """后台线程发布时轮询不报错，且读到的序号连续递增"""
        errors = []
        writers_done = threading.Event()

        def writer(worker):
            try:
                for i in range(200):
                    event_bus.publish(Event(
                        event_type="room.released", timestamp=datetime.now(),
                        data={"worker": worker, "i": i}, source="test"
                    ))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(2)]
        for thread in threads:
            thread.start()

        def join_all():
            for thread in threads:
                thread.join()
            writers_done.set()

        joiner = threading.Thread(target=join_all)
        joiner.start()

        while not writers_done.is_set():
            snapshot = event_bus.get_since(0, 500)
            ids = [e.event_id for e in snapshot]
            assert ids == sorted(ids)
            assert len(ids) == len(set(ids))
        joiner.join()

        assert errors == []
        ids = [e.event_id for e in event_bus.get_since(0, 500)]
        assert len(ids) == 400
        assert ids == list(range(ids[0], ids[0] + 400))

    def test_event_to_dict(self):
        event = Event(event_type=EventType.ROOM_RELEASED, timestamp=datetime(2024, 1, 1), data={}, source="t")
        result = event.to_dict()
        assert result["event_type"] == "room.released"
        assert result["timestamp"] == "2024-01-01T00:00:00"


class TestEventData:
    """事件数据序列化"""

    def test_datetimes_serialized(self):
        data = RoomReleasedData(
            room_id=1, room_number="101", released_at=datetime(2024, 1, 12, 11, 0, 3),
            entities={"room": [1]}
        ).to_dict()
        assert data["released_at"] == "2024-01-12T11:00:03"
        assert data["entities"] == {"room": [1]}

    def test_booking_created_fields(self):
        data = BookingCreatedData(booking_id=5, total_price=1000000.0, entities={"guest": [5]}).to_dict()
        assert data["booking_id"] == 5
        assert data["transaction_id"] is None
        assert isinstance(data["timestamp"], str)
