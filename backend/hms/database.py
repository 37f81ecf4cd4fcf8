"""
数据库配置 - SQLAlchemy 持久化层
所有多步写操作都在同一个会话事务中提交
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from hms.config import settings

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

_connect_args = {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args=_connect_args
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """依赖注入：获取数据库会话"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """初始化数据库表"""
    from hms.models import ontology  # noqa
    Base.metadata.create_all(bind=engine)
