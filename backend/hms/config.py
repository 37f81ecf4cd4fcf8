"""
应用配置
从环境变量 / .env 读取配置
"""
from typing import List
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用设置"""

    # 应用基础配置
    APP_NAME: str = "HMS"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # 数据库配置
    DATABASE_URL: str = "sqlite:///./hms.db"

    # JWT 配置
    SECRET_KEY: str = "hms-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # 酒店所在时区，用于"今日"营收等统计
    HOTEL_TIMEZONE: str = "Asia/Jakarta"

    # 退房后清洁缓冲（秒），到期后由定时扫描释放房间
    CLEANING_DELAY_SECONDS: int = 3
    CLEANING_SWEEP_INTERVAL_SECONDS: int = 1
    ENABLE_SCHEDULER: bool = True

    # 活动记录
    ACTIVITY_FEED_LIMIT: int = 20
    TEAM_FEED_LIMIT: int = 6

    # 入住自动入账的收入分类
    ROOM_REVENUE_CATEGORY: str = "客房收入"

    CORS_ORIGINS: List[str] = ["http://localhost:5173"]

    model_config = ConfigDict(env_file=".env", case_sensitive=True)


# 全局设置实例
settings = Settings()
