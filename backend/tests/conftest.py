"""
pytest配置和fixtures
"""
import os
import random
import sys
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

# 测试环境：内存数据库，不启动后台学习
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENABLE_BACKGROUND_LEARNING", "false")

# 添加backend路径到sys.path
backend_path = Path(__file__).parent.parent
sys.path.insert(0, str(backend_path))

from app.core.database import init_db  # noqa: E402
from app.services.learning_engine import LearningEngine  # noqa: E402
from app.services.learning_store import LearningStorage, SqlWeightStore  # noqa: E402
from app.services.weight_policy import RandomPerturbationPolicy  # noqa: E402


SAMPLE_TEXT = (
    "This research paper presents a comprehensive analysis of distributed caching methods. "
    "The introduction explains why caching is important for modern web applications. "
    "What makes a cache effective is the balance between memory usage and hit ratio. "
    "Our methodology compares three eviction strategies across several realistic workloads. "
    "The implementation uses a simple configuration and a shared measurement framework. "
    "Results suggest that adaptive eviction improves the hit ratio under bursty traffic. "
    "The analysis indicates that memory fragmentation remains a significant limitation. "
    "Further study of the eviction strategies is needed for write heavy workloads. "
    "In conclusion, the study reveals significant findings about adaptive caching methods."
)


@pytest.fixture
def sample_text():
    """多句英文学术文本"""
    return SAMPLE_TEXT


@pytest.fixture
async def db_engine():
    """每个测试独立的内存数据库"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(bind=engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
def storage(session_factory):
    return LearningStorage(session_factory)


@pytest.fixture
def weight_store(session_factory):
    return SqlWeightStore(session_factory)


@pytest.fixture
def learning_engine(storage, weight_store):
    """使用固定随机种子的学习引擎"""
    return LearningEngine(
        storage=storage,
        weight_store=weight_store,
        policy=RandomPerturbationPolicy(rng=random.Random(42)),
        lookback=20,
        min_documents=5,
    )
