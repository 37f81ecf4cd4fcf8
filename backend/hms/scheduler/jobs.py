"""
定时任务
清洁扫描：把清洁时间已到的房间释放为 available
"""
from typing import Callable, List
import logging
from sqlalchemy.orm import Session
from hms.config import settings
from hms.database import SessionLocal
from hms.scheduler.apscheduler_backend import APSchedulerBackend
from hms.services.checkout_service import CheckOutService

logger = logging.getLogger(__name__)

CLEANING_SWEEP_JOB_ID = "release_cleaned_rooms"


def run_cleaning_sweep(session_factory: Callable[[], Session] = SessionLocal) -> List[int]:
    """执行一次清洁扫描，返回被释放的房间 id"""
    db = session_factory()
    try:
        rooms = CheckOutService(db).release_cleaned_rooms()
        return [room.id for room in rooms]
    except Exception:
        logger.exception("Cleaning sweep failed")
        return []
    finally:
        db.close()


def register_cleaning_sweep(backend: APSchedulerBackend,
                            session_factory: Callable[[], Session] = SessionLocal) -> None:
    """按 CLEANING_SWEEP_INTERVAL_SECONDS 注册清洁扫描任务"""
    backend.add_job(
        CLEANING_SWEEP_JOB_ID,
        run_cleaning_sweep,
        "interval",
        seconds=settings.CLEANING_SWEEP_INTERVAL_SECONDS,
        kwargs={'session_factory': session_factory},
        max_instances=1,
        coalesce=True
    )
