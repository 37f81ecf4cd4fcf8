"""
用户服务 - 本体操作层
管理 User 对象和认证；用户管理只允许业主在服务端执行
"""
from typing import List, Optional, Callable
from datetime import datetime
import logging
from sqlalchemy import func
from sqlalchemy.orm import Session
from hms.models.ontology import User, UserRole, Guest
from hms.models.schemas import RegisterRequest, UserCreate, PasswordReset
from hms.security.auth import get_password_hash, verify_password, create_access_token
from hms.services.event_bus import event_bus, Event
from hms.models.events import EventType, EntityChangedData

logger = logging.getLogger(__name__)


class UserService:
    """用户服务"""

    def __init__(self, db: Session, event_publisher: Callable[[Event], None] = None):
        self.db = db
        self._publish_event = event_publisher or event_bus.publish

    def _publish_user_event(self, event_type: EventType, user_id: int,
                            operator_id: Optional[int] = None) -> None:
        self._publish_event(Event(
            event_type=event_type,
            timestamp=datetime.now(),
            data=EntityChangedData(
                entity_type="user",
                entity_id=user_id,
                operator_id=operator_id,
                entities={"user": [user_id]}
            ).to_dict(),
            source="user_service"
        ))

    def get_users(self, role: Optional[UserRole] = None) -> List[User]:
        """获取用户列表"""
        query = self.db.query(User)
        if role:
            query = query.filter(User.role == role)
        return query.order_by(User.created_at.desc(), User.id.desc()).all()

    def get_user(self, user_id: int) -> Optional[User]:
        """获取单个用户"""
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_email(self, email: str) -> Optional[User]:
        """根据邮箱获取用户（不区分大小写）"""
        return self.db.query(User).filter(
            func.lower(User.email) == (email or "").strip().lower()
        ).first()

    def _create(self, name: str, email: str, password: str, role: UserRole) -> User:
        name = (name or "").strip()
        email = (email or "").strip().lower()
        if not name or not email:
            raise ValueError("姓名和邮箱不能为空")
        if self.get_user_by_email(email):
            raise ValueError(f"邮箱 '{email}' 已注册")

        user = User(
            name=name,
            email=email,
            password_hash=get_password_hash(password),
            role=role
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def register(self, data: RegisterRequest) -> User:
        """
        自助注册

        系统中的第一个账号成为业主，其余注册账号均为员工
        """
        role = UserRole.OWNER if self.db.query(User).count() == 0 else UserRole.STAFF
        user = self._create(data.name, data.email, data.password, role)
        logger.info(f"User {user.id} registered as {user.role.value}")
        self._publish_user_event(EventType.USER_CREATED, user.id)
        return user

    def create_user(self, data: UserCreate, operator: Optional[User] = None) -> User:
        """业主创建用户并指定角色"""
        user = self._create(data.name, data.email, data.password, data.role)
        logger.info(f"User {user.id} created as {user.role.value}")
        self._publish_user_event(EventType.USER_CREATED, user.id, operator.id if operator else None)
        return user

    def update_role(self, user_id: int, role: UserRole, operator: Optional[User] = None) -> User:
        """修改用户角色，业主不能降低自己的角色"""
        user = self.get_user(user_id)
        if not user:
            raise ValueError("用户不存在")
        if operator and operator.id == user.id and role != UserRole.OWNER:
            raise ValueError("不能修改自己的业主角色")

        user.role = role
        self.db.commit()
        self.db.refresh(user)

        logger.info(f"User {user.id} role changed to {role.value}")
        self._publish_user_event(EventType.USER_UPDATED, user.id, operator.id if operator else None)
        return user

    def reset_password(self, user_id: int, data: PasswordReset,
                       operator: Optional[User] = None) -> bool:
        """重置密码"""
        user = self.get_user(user_id)
        if not user:
            raise ValueError("用户不存在")

        user.password_hash = get_password_hash(data.new_password)
        self.db.commit()
        logger.info(f"Password of user {user.id} reset")
        self._publish_user_event(EventType.USER_UPDATED, user.id, operator.id if operator else None)
        return True

    def delete_user(self, user_id: int, operator: Optional[User] = None) -> bool:
        """
        删除用户

        业主不能删除自己；用户的活动记录随之删除，其接待过的住客记录保留但不再关联接待人
        """
        user = self.get_user(user_id)
        if not user:
            raise ValueError("用户不存在")
        if operator and operator.id == user.id:
            raise ValueError("不能删除自己的账号")

        try:
            self.db.query(Guest).filter(Guest.received_by == user.id).update(
                {Guest.received_by: None}, synchronize_session=False
            )
            self.db.delete(user)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception(f"Deleting user {user_id} failed, rolled back")
            raise

        logger.info(f"User {user_id} deleted")
        self._publish_user_event(EventType.USER_DELETED, user_id, operator.id if operator else None)
        return True

    def authenticate(self, email: str, password: str) -> Optional[dict]:
        """认证登录"""
        user = self.get_user_by_email(email)
        if not user:
            return None

        if not verify_password(password, user.password_hash):
            return None

        if not user.is_active:
            raise ValueError("账号已停用")

        token = create_access_token(user.id, user.role)
        logger.info(f"User {user.id} logged in")

        return {
            'access_token': token,
            'token_type': 'bearer',
            'user': user
        }
