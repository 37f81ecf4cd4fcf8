"""
财务与报表服务测试
"""
import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

from hms.models.ontology import (
    Transaction, TransactionType, Room, RoomStatus, Guest, BookingStatus
)
from hms.models.schemas import TransactionCreate
from hms.models.events import EventType
from hms.services.finance_service import FinanceService
from hms.services.report_service import ReportService


def add_transaction(db_session, type, amount, on, category="其他"):
    t = Transaction(type=type, amount=Decimal(amount), description="test", date=on, category=category)
    db_session.add(t)
    db_session.commit()
    return t


class TestFinanceService:
    """财务流水"""

    def test_create_manual_transaction(self, db_session, owner):
        events = []
        service = FinanceService(db_session, event_publisher=events.append)
        t = service.create_transaction(TransactionCreate(
            type=TransactionType.EXPENSE, amount=Decimal("250000"),
            category=" Laundry ", description="Linen", date=date(2024, 1, 5)
        ), owner.id)

        assert t.category == "Laundry"
        assert events[0].event_type == EventType.TRANSACTION_CREATED
        assert events[0].data["entities"] == {"transaction": [t.id]}

    def test_blank_description_rejected(self, db_session):
        service = FinanceService(db_session, event_publisher=MagicMock())
        data = TransactionCreate.model_construct(
            type=TransactionType.INCOME, amount=Decimal("1"), category="x",
            description="   ", date=date(2024, 1, 5)
        )
        with pytest.raises(ValueError, match="描述"):
            service.create_transaction(data)
        assert db_session.query(Transaction).count() == 0

    def test_non_finite_amount_rejected(self, db_session):
        service = FinanceService(db_session, event_publisher=MagicMock())
        data = TransactionCreate.model_construct(
            type=TransactionType.INCOME, amount=Decimal("Infinity"), category="x",
            description="y", date=date(2024, 1, 5)
        )
        with pytest.raises(ValueError):
            service.create_transaction(data)

    def test_totals_and_ordering(self, db_session):
        add_transaction(db_session, TransactionType.INCOME, "1000", date(2024, 1, 1))
        add_transaction(db_session, TransactionType.EXPENSE, "300", date(2024, 1, 3))
        add_transaction(db_session, TransactionType.INCOME, "500", date(2024, 1, 2))
        service = FinanceService(db_session)

        totals = service.get_totals()
        assert totals == {'income': Decimal("1500"), 'expense': Decimal("300"), 'balance': Decimal("1200")}
        assert [t.date.day for t in service.get_transactions()] == [3, 2, 1]
        assert len(service.get_transactions(limit=2)) == 2
        assert len(service.get_transactions(TransactionType.INCOME)) == 2


class TestReportService:
    """报表"""

    def test_dashboard_metrics(self, db_session, checked_in_booking, sample_rooms):
        add_transaction(db_session, TransactionType.INCOME, "1000000", date(2024, 1, 10))
        add_transaction(db_session, TransactionType.INCOME, "5", date(2024, 1, 9))
        service = ReportService(db_session, today_provider=lambda: date(2024, 1, 10))

        metrics = service.get_dashboard_metrics()
        assert metrics['total_guests'] == 1
        assert metrics['available_rooms'] == 3
        assert metrics['revenue_today'] == Decimal("1000000")
        # 5 间房中 101、203 为 occupied
        assert metrics['occupancy_rate'] == 40.0

    def test_dashboard_without_rooms(self, db_session):
        metrics = ReportService(db_session, today_provider=lambda: date(2024, 1, 10)).get_dashboard_metrics()
        assert metrics['occupancy_rate'] == 0
        assert metrics['revenue_today'] == 0

    def test_daily_cashflow_zero_filled(self, db_session):
        add_transaction(db_session, TransactionType.INCOME, "100", date(2024, 1, 10))
        add_transaction(db_session, TransactionType.EXPENSE, "40", date(2024, 1, 7))
        add_transaction(db_session, TransactionType.INCOME, "999", date(2024, 1, 1))

        rows = ReportService(db_session).get_daily_cashflow()
        assert [r['date'] for r in rows] == [date(2024, 1, d) for d in range(4, 11)]
        assert rows[-1]['income'] == Decimal("100")
        assert rows[3]['expense'] == Decimal("40")
        assert rows[0]['income'] == 0

    def test_daily_cashflow_defaults_to_today(self, db_session):
        rows = ReportService(db_session, today_provider=lambda: date(2024, 3, 1)).get_daily_cashflow()
        assert rows[-1]['date'] == date(2024, 3, 1)
        assert len(rows) == 7

    def test_monthly_summary(self, db_session):
        add_transaction(db_session, TransactionType.INCOME, "100", date(2024, 2, 3))
        add_transaction(db_session, TransactionType.INCOME, "300", date(2024, 1, 3))
        add_transaction(db_session, TransactionType.EXPENSE, "50", date(2024, 1, 20))

        rows = ReportService(db_session).get_monthly_summary()
        assert [r['period'] for r in rows] == ["2024-01", "2024-02"]
        assert rows[0]['profit'] == Decimal("250")

    def test_room_type_occupancy(self, db_session, checked_in_booking, sample_rooms):
        suite_room = sample_rooms[3]
        for name in ("A", "B"):
            db_session.add(Guest(
                name=name, phone="1", check_in=date(2024, 1, 10), check_out=date(2024, 1, 11),
                room_id=suite_room.id, nights=1, price_per_night=Decimal("1"),
                total_price=Decimal("1"), booking_status=BookingStatus.CHECKED_IN
            ))
        db_session.commit()

        shares = {r['name']: r['value'] for r in ReportService(db_session).get_room_type_occupancy()}
        assert shares == {"Deluxe": 33.33, "Suite": 66.67}
