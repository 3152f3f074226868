"""
学习存储测试
"""
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.models.document import Document
from app.models.learning_metrics import LearningMetricsRecord
from app.models.summary import Summary
from app.schemas.learning import LearningPerformance, LearningState, WeightVector
from app.services.learning_store import LearningStorage, SqlWeightStore
from app.utils.processing_exception import PersistenceError


def _document(title: str, source: str = "upload") -> Document:
    return Document(
        title=title,
        source=source,
        plain_text="Some extracted text for testing purposes.",
        file_size=42,
        word_count=6,
        sentence_count=1,
        language="en",
        document_type="general",
    )


async def test_weight_store_latest_is_last_appended(weight_store):
    """最新写入的记录即当前权重"""
    assert await weight_store.get_latest() is None

    await weight_store.append(LearningState(version="1.0.0"))
    await weight_store.append(LearningState(
        version="1.0.1",
        weights=WeightVector(position_weight=3.9),
        performance=LearningPerformance(average_quality=0.01, documents_processed=5),
    ))

    latest = await weight_store.get_latest()
    assert latest.version == "1.0.1"
    assert latest.weights.position_weight == 3.9
    assert latest.performance.documents_processed == 5
    assert latest.id is not None


async def test_weight_store_history_newest_first(weight_store):
    for version in ("1.0.0", "1.0.1", "1.0.2"):
        await weight_store.append(LearningState(version=version))

    history = await weight_store.history()
    assert [state.version for state in history] == ["1.0.2", "1.0.1", "1.0.0"]
    assert len(await weight_store.history(limit=2)) == 2


async def test_store_and_get_document(storage):
    stored = await storage.store_document(_document("First"))
    assert stored.extracted_at is not None

    loaded = await storage.get_document(stored.id)
    assert loaded.title == "First"
    assert await storage.get_document("missing") is None


async def test_recent_documents_newest_first(storage):
    for title in ("one", "two", "three"):
        await storage.store_document(_document(title))

    documents = await storage.get_recent_documents(limit=2)
    assert [document.title for document in documents] == ["three", "two"]


async def test_summaries_for_document(storage):
    document = await storage.store_document(_document("Doc"))
    summary = await storage.store_summary(Summary(
        document_id=document.id,
        summary_text="A summary.",
        summary_level="student",
        algorithm="intelligent-v2-learning",
        key_phrases=["cache", "memory"],
        quality_score=0.7,
    ))

    summaries = await storage.list_summaries_for_document(document.id)
    assert [item.id for item in summaries] == [summary.id]
    loaded = await storage.get_summary(summary.id)
    assert loaded.key_phrases == ["cache", "memory"]
    assert loaded.user_feedback is None


async def test_statistics(storage):
    first = await storage.store_document(_document("a", "upload"))
    await storage.store_document(_document("b", "url"))
    await storage.store_document(_document("c", "url"))

    summary = await storage.store_summary(Summary(
        document_id=first.id,
        summary_text="A summary.",
        summary_level="professor",
        algorithm="intelligent-v2-learning",
        key_phrases=[],
        quality_score=0.6,
    ))
    for score in (0.4, 0.8):
        await storage.store_metrics(LearningMetricsRecord(
            document_id=first.id,
            summary_id=summary.id,
            coherence_score=0.5,
            relevance_score=0.5,
            compression_ratio=0.5,
            keyword_coverage=0.5,
            sentence_quality=0.5,
            overall_score=score,
            detected_issues=[],
            improvement_suggestions=[],
        ))

    stats = await storage.get_statistics()
    assert stats["total_documents"] == 3
    assert stats["source_distribution"] == {"upload": 1, "url": 2}
    assert stats["total_summaries"] == 1
    assert stats["level_distribution"] == {"professor": 1}
    assert stats["quality_statistics"]["average_overall_score"] == pytest.approx(0.6)
    assert stats["quality_statistics"]["total_analyzed"] == 2


async def test_statistics_empty(storage):
    stats = await storage.get_statistics()
    assert stats["total_documents"] == 0
    assert stats["quality_statistics"] == {"average_overall_score": 0.0, "total_analyzed": 0}


def test_metrics_from_record():
    record = LearningMetricsRecord(
        coherence_score=0.1,
        relevance_score=0.2,
        compression_ratio=0.3,
        keyword_coverage=0.4,
        sentence_quality=0.5,
        overall_score=0.6,
    )
    metrics = LearningStorage.metrics_from_record(record)
    assert metrics.relevance == 0.2
    assert metrics.overall_score == 0.6


async def test_database_errors_wrapped():
    """缺少数据表时抛出PersistenceError"""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    factory = async_sessionmaker(bind=engine, expire_on_commit=False)
    try:
        with pytest.raises(PersistenceError):
            await LearningStorage(factory).get_recent_documents()
        with pytest.raises(PersistenceError):
            await SqlWeightStore(factory).get_latest()
        with pytest.raises(PersistenceError):
            await LearningStorage(factory).store_document(_document("x"))
    finally:
        await engine.dispose()
