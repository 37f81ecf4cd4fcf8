# Scheduler
from hms.scheduler.apscheduler_backend import APSchedulerBackend
from hms.scheduler.jobs import CLEANING_SWEEP_JOB_ID, run_cleaning_sweep, register_cleaning_sweep

__all__ = [
    'APSchedulerBackend',
    'CLEANING_SWEEP_JOB_ID', 'run_cleaning_sweep', 'register_cleaning_sweep'
]
