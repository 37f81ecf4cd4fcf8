"""
APScheduler 调度后端
"""
from typing import Callable, Optional
import logging
from apscheduler.schedulers.background import BackgroundScheduler

logger = logging.getLogger(__name__)


class APSchedulerBackend:
    """基于 BackgroundScheduler 的调度后端，由应用 lifespan 启停"""

    def __init__(self, scheduler: Optional[BackgroundScheduler] = None):
        self._scheduler = scheduler or BackgroundScheduler()

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info("Scheduler started")

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")

    def add_job(self, job_id: str, func: Callable, trigger: str, **trigger_args) -> None:
        """添加任务，同 id 任务会被替换"""
        self._scheduler.add_job(
            func, trigger=trigger, id=job_id, replace_existing=True, **trigger_args
        )
        logger.info(f"Job {job_id} registered ({trigger})")
