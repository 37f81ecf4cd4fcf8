"""
HMS 主应用入口
酒店前台：房间、预订、入住退房、财务、餐厅与用户管理
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from hms import __version__
from hms.config import settings
from hms.database import init_db
from hms.routers import (
    auth, rooms, guests, finances, reports, restaurant, facilities, users, activities, events
)
from hms.scheduler import APSchedulerBackend, register_cleaning_sweep

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )

    # 初始化数据库
    init_db()

    # 清洁扫描：释放清洁时间已到的房间（包括服务重启前排定的）
    backend = None
    if settings.ENABLE_SCHEDULER:
        backend = APSchedulerBackend()
        register_cleaning_sweep(backend)
        backend.start()

    logger.info(f"{settings.APP_NAME} {__version__} started")

    yield

    if backend is not None:
        backend.shutdown()


# 创建应用
app = FastAPI(
    title="HMS - 酒店管理系统",
    description="酒店前台与房态管理",
    version=__version__,
    lifespan=lifespan
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(auth.router)
app.include_router(rooms.router)
app.include_router(guests.router)
app.include_router(finances.router)
app.include_router(reports.router)
app.include_router(restaurant.router)
app.include_router(facilities.router)
app.include_router(users.router)
app.include_router(activities.router)
app.include_router(events.router)


@app.get("/")
def root():
    """根路径"""
    return {
        "name": "HMS - 酒店管理系统",
        "version": __version__
    }


@app.get("/health")
def health_check():
    """健康检查"""
    return {"status": "healthy"}
