"""
数据库初始化脚本
创建数据表并写入初始权重（1.0.0）
"""
import asyncio
import sys
from pathlib import Path

# 添加项目根目录到路径
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app.core.database import engine, init_db
from app.core.logging import setup_logging
from app.services.learning_engine import get_learning_engine
import structlog

logger = structlog.get_logger()


async def main():
    """初始化数据库表结构和初始权重"""
    try:
        logger.info("开始初始化数据库...")
        await init_db()
        logger.info("数据库表创建成功")

        state = await get_learning_engine().initialize()
        logger.info("当前学习权重", version=state.version)
    except Exception as e:
        logger.error("数据库初始化失败", error=str(e))
        raise
    finally:
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main())
