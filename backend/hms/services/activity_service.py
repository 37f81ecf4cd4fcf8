"""
活动记录服务
每个用户的操作日志只追加不修改，个人列表取最近 N 条（最新在前）
"""
from typing import List, Optional, Callable
from datetime import datetime
import logging
from sqlalchemy.orm import Session, joinedload
from hms.config import settings
from hms.models.ontology import UserActivity, User
from hms.services.event_bus import event_bus, Event
from hms.models.events import EventType, EntityChangedData

logger = logging.getLogger(__name__)


class ActivityService:
    """活动记录服务"""

    def __init__(self, db: Session, event_publisher: Callable[[Event], None] = None):
        self.db = db
        self._publish_event = event_publisher or event_bus.publish

    def record(self, user_id: int, message: str) -> UserActivity:
        """追加一条活动记录"""
        message = (message or "").strip()
        if not message:
            raise ValueError("活动内容不能为空")

        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise ValueError("用户不存在")

        activity = UserActivity(user_id=user_id, message=message)
        self.db.add(activity)
        self.db.commit()
        self.db.refresh(activity)

        self._publish_event(Event(
            event_type=EventType.ACTIVITY_RECORDED,
            timestamp=datetime.now(),
            data=EntityChangedData(
                entity_type="activity",
                entity_id=activity.id,
                operator_id=user_id,
                entities={"activity": [activity.id], "user": [user_id]}
            ).to_dict(),
            source="activity_service"
        ))
        return activity

    def record_safely(self, user_id: int, message: str) -> Optional[UserActivity]:
        """
        业务操作成功后的附带记录

        记录失败只写日志，不影响已提交的业务操作。
        """
        try:
            return self.record(user_id, message)
        except Exception:
            self.db.rollback()
            logger.exception(f"Failed to record activity for user {user_id}")
            return None

    def get_user_activities(self, user_id: int, limit: Optional[int] = None) -> List[UserActivity]:
        """用户最近的活动（最新在前）"""
        limit = limit or settings.ACTIVITY_FEED_LIMIT
        return self.db.query(UserActivity).filter(
            UserActivity.user_id == user_id
        ).order_by(
            UserActivity.created_at.desc(), UserActivity.id.desc()
        ).limit(limit).all()

    def get_team_activities(self, limit: Optional[int] = None) -> List[dict]:
        """团队最新动态，附带用户姓名与角色"""
        limit = limit or settings.TEAM_FEED_LIMIT
        activities = self.db.query(UserActivity).options(
            joinedload(UserActivity.user)
        ).order_by(
            UserActivity.created_at.desc(), UserActivity.id.desc()
        ).limit(limit).all()

        return [
            {
                'id': a.id,
                'user_id': a.user_id,
                'message': a.message,
                'created_at': a.created_at,
                'user_name': a.user.name if a.user else None,
                'user_role': a.user.role if a.user else None
            }
            for a in activities
        ]
