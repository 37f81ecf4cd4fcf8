"""
报表服务 - 只读统计
仪表盘指标、近 7 日现金流、月度汇总、各房型在住占比
"""
from typing import List, Callable, Dict
from collections import OrderedDict
from datetime import date, datetime, timedelta
from decimal import Decimal
from zoneinfo import ZoneInfo
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func
from hms.config import settings
from hms.models.ontology import (
    Room, RoomStatus, Guest, BookingStatus, Transaction, TransactionType
)


def hotel_today() -> date:
    """酒店所在时区的今天"""
    return datetime.now(ZoneInfo(settings.HOTEL_TIMEZONE)).date()


class ReportService:
    """报表服务"""

    def __init__(self, db: Session, today_provider: Callable[[], date] = None):
        self.db = db
        self._today = today_provider or hotel_today

    def get_dashboard_metrics(self) -> dict:
        """
        仪表盘指标

        occupancy_rate = occupied / 全部房间 × 100，保留两位小数
        """
        today = self._today()

        total_guests = self.db.query(Guest).filter(
            Guest.booking_status.in_([BookingStatus.RESERVATION, BookingStatus.CHECKED_IN])
        ).count()

        rooms = self.db.query(Room).all()
        total_rooms = len(rooms)
        available = len([r for r in rooms if r.status == RoomStatus.AVAILABLE])
        occupied = len([r for r in rooms if r.status == RoomStatus.OCCUPIED])
        occupancy_rate = round(occupied / total_rooms * 100, 2) if total_rooms else 0

        revenue_today = self.db.query(func.sum(Transaction.amount)).filter(
            Transaction.type == TransactionType.INCOME,
            Transaction.date == today
        ).scalar() or Decimal('0')

        return {
            'total_guests': total_guests,
            'available_rooms': available,
            'revenue_today': revenue_today,
            'occupancy_rate': occupancy_rate
        }

    def get_daily_cashflow(self, days: int = 7) -> List[dict]:
        """
        连续 days 天的收支，截止到最近一笔流水日期（无流水时为今天），缺失日期补 0
        """
        end = self.db.query(func.max(Transaction.date)).scalar() or self._today()
        start = end - timedelta(days=days - 1)

        buckets: Dict[date, dict] = OrderedDict()
        current = start
        while current <= end:
            buckets[current] = {'date': current, 'income': Decimal('0'), 'expense': Decimal('0')}
            current += timedelta(days=1)

        transactions = self.db.query(Transaction).filter(
            Transaction.date >= start,
            Transaction.date <= end
        ).all()
        for t in transactions:
            key = 'income' if t.type == TransactionType.INCOME else 'expense'
            buckets[t.date][key] += t.amount

        return list(buckets.values())

    def get_monthly_summary(self) -> List[dict]:
        """按月（YYYY-MM）汇总收入、支出与利润"""
        periods: Dict[str, dict] = {}
        for t in self.db.query(Transaction).all():
            period = t.date.strftime('%Y-%m')
            row = periods.setdefault(period, {
                'period': period, 'revenue': Decimal('0'), 'expenses': Decimal('0')
            })
            if t.type == TransactionType.INCOME:
                row['revenue'] += t.amount
            else:
                row['expenses'] += t.amount

        result = []
        for period in sorted(periods):
            row = periods[period]
            row['profit'] = row['revenue'] - row['expenses']
            result.append(row)
        return result

    def get_room_type_occupancy(self) -> List[dict]:
        """在住住客按房型的占比（百分比，两位小数）"""
        bookings = self.db.query(Guest).options(
            joinedload(Guest.room).joinedload(Room.room_type)
        ).filter(Guest.booking_status == BookingStatus.CHECKED_IN).all()

        counts: Dict[str, int] = {}
        for booking in bookings:
            name = booking.room.type_name if booking.room else "-"
            counts[name] = counts.get(name, 0) + 1

        total = sum(counts.values())
        if total == 0:
            return []
        return [
            {'name': name, 'value': round(count / total * 100, 2)}
            for name, count in counts.items()
        ]

    def get_recent_transactions(self, limit: int = 5) -> List[Transaction]:
        """最近流水"""
        return self.db.query(Transaction).order_by(
            Transaction.date.desc(), Transaction.id.desc()
        ).limit(limit).all()
