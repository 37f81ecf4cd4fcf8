"""
财务服务 - 收支流水
"""
from typing import List, Optional, Callable
from datetime import datetime
from decimal import Decimal
import logging
from sqlalchemy.orm import Session
from hms.domain.lifecycle import to_price
from hms.models.ontology import Transaction, TransactionType
from hms.models.schemas import TransactionCreate
from hms.services.event_bus import event_bus, Event
from hms.models.events import EventType, TransactionCreatedData

logger = logging.getLogger(__name__)


class FinanceService:
    """财务服务"""

    def __init__(self, db: Session, event_publisher: Callable[[Event], None] = None):
        self.db = db
        self._publish_event = event_publisher or event_bus.publish

    def get_transactions(self, type: Optional[TransactionType] = None,
                         limit: Optional[int] = None) -> List[Transaction]:
        """流水列表（日期倒序）"""
        query = self.db.query(Transaction)
        if type is not None:
            query = query.filter(Transaction.type == type)
        query = query.order_by(Transaction.date.desc(), Transaction.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    def get_totals(self) -> dict:
        """收入、支出与结余"""
        income = Decimal('0')
        expense = Decimal('0')
        for transaction in self.db.query(Transaction).all():
            if transaction.type == TransactionType.INCOME:
                income += transaction.amount
            else:
                expense += transaction.amount
        return {'income': income, 'expense': expense, 'balance': income - expense}

    def create_transaction(self, data: TransactionCreate, operator_id: Optional[int] = None) -> Transaction:
        """新增手工流水：分类、描述、日期必填，金额为正的有限数"""
        category = (data.category or "").strip()
        description = (data.description or "").strip()
        if not category:
            raise ValueError("分类不能为空")
        if not description:
            raise ValueError("描述不能为空")
        if data.date is None:
            raise ValueError("日期不能为空")
        amount = to_price(data.amount)
        if amount <= 0:
            raise ValueError("金额必须大于 0")

        transaction = Transaction(
            type=data.type,
            amount=amount,
            category=category,
            description=description,
            date=data.date
        )
        self.db.add(transaction)
        self.db.commit()
        self.db.refresh(transaction)

        logger.info(f"Transaction {transaction.id} {transaction.type.value} {amount} recorded")
        self._publish_event(Event(
            event_type=EventType.TRANSACTION_CREATED,
            timestamp=datetime.now(),
            data=TransactionCreatedData(
                transaction_id=transaction.id,
                type=transaction.type.value,
                amount=float(amount),
                category=category,
                date=transaction.date.isoformat(),
                entities={"transaction": [transaction.id]}
            ).to_dict(),
            source="finance_service"
        ))
        return transaction
