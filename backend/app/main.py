"""
自学习PDF摘要系统 - FastAPI应用入口
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog

from app.core.config import settings
from app.core.database import init_db
from app.core.logging import setup_logging
from app.api.v1 import documents as documents_router
from app.api.v1 import summaries as summaries_router
from app.api.v1 import learning as learning_router
from app.services.learning_engine import get_learning_engine
from app.services.scheduler import PeriodicTask

# 配置日志
setup_logging()
logger = structlog.get_logger()

# 创建FastAPI应用
app = FastAPI(
    title=settings.APP_NAME,
    description="PDF文本提取与自学习摘要平台",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.include_router(documents_router.router, prefix="/api/v1")
app.include_router(summaries_router.router, prefix="/api/v1")
app.include_router(learning_router.router, prefix="/api/v1")

# 配置CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

learning_task = None


@app.on_event("startup")
async def startup_event():
    """应用启动事件"""
    global learning_task
    logger.info("应用启动", version="1.0.0")

    await init_db()
    engine = get_learning_engine()
    state = await engine.initialize()
    logger.info("当前学习权重", version=state.version)

    if settings.ENABLE_BACKGROUND_LEARNING:
        learning_task = PeriodicTask(
            "learning-cycle",
            engine.run_learning_cycle,
            interval=settings.LEARNING_INTERVAL_SECONDS,
            initial_delay=settings.LEARNING_INITIAL_DELAY_SECONDS,
        )
        learning_task.start()


@app.on_event("shutdown")
async def shutdown_event():
    """应用关闭事件"""
    if learning_task is not None:
        await learning_task.stop()
    await get_learning_engine().wait_for_background_cycles()
    logger.info("应用关闭")


@app.get("/")
async def root():
    """根路径"""
    return {
        "message": f"{settings.APP_NAME} API",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """健康检查"""
    return {"status": "healthy"}
