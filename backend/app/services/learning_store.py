"""
自学习存储服务
- 版本化权重存储（只追加，最新记录即当前权重）
- 文档、摘要、质量指标记录的读写
所有SQLAlchemy错误统一包装为PersistenceError
"""
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, List, Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.document import Document
from app.models.learning_metrics import LearningMetricsRecord
from app.models.learning_weights import LearningWeightsRecord
from app.models.summary import Summary
from app.schemas.learning import (
    LearningPerformance,
    LearningState,
    QualityMetrics,
    WeightVector,
)
from app.utils.processing_exception import PersistenceError

logger = structlog.get_logger()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VersionedWeightStore(ABC):
    """版本化权重存储接口"""

    @abstractmethod
    async def get_latest(self) -> Optional[LearningState]:
        """获取当前（最新写入的）学习状态，不存在返回None"""

    @abstractmethod
    async def append(self, state: LearningState) -> LearningState:
        """追加一条新的学习状态，成为当前状态"""

    @abstractmethod
    async def history(self, limit: int = 50) -> List[LearningState]:
        """按写入顺序倒序返回历史状态"""


class SqlWeightStore(VersionedWeightStore):
    """基于SQLAlchemy的版本化权重存储"""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    @staticmethod
    def to_state(record: LearningWeightsRecord) -> LearningState:
        return LearningState(
            id=record.id,
            version=record.version,
            weights=WeightVector(
                position_weight=record.position_weight,
                length_weight=record.length_weight,
                keyword_weight=record.keyword_weight,
                importance_phrase_weight=record.importance_phrase_weight,
                academic_term_weight=record.academic_term_weight,
                question_weight=record.question_weight,
            ),
            performance=LearningPerformance(
                average_quality=record.average_quality,
                documents_processed=record.documents_processed,
                last_updated=record.last_updated,
            ),
        )

    async def get_latest(self) -> Optional[LearningState]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(LearningWeightsRecord)
                    .order_by(LearningWeightsRecord.sequence.desc())
                    .limit(1)
                )
                record = result.scalar_one_or_none()
                return self.to_state(record) if record else None
        except SQLAlchemyError as e:
            logger.error("读取当前权重失败", error=str(e))
            raise PersistenceError(f"Failed to read current weights: {e}") from e

    async def append(self, state: LearningState) -> LearningState:
        weights = state.weights
        record = LearningWeightsRecord(
            version=state.version,
            position_weight=weights.position_weight,
            length_weight=weights.length_weight,
            keyword_weight=weights.keyword_weight,
            importance_phrase_weight=weights.importance_phrase_weight,
            academic_term_weight=weights.academic_term_weight,
            question_weight=weights.question_weight,
            average_quality=state.performance.average_quality,
            documents_processed=state.performance.documents_processed,
            last_updated=state.performance.last_updated,
            created_at=utcnow(),
        )
        try:
            async with self.session_factory() as session:
                session.add(record)
                await session.commit()
                await session.refresh(record)
        except SQLAlchemyError as e:
            logger.error("写入权重失败", version=state.version, error=str(e))
            raise PersistenceError(f"Failed to store weights: {e}", {"version": state.version}) from e

        logger.info("权重已更新", version=record.version, sequence=record.sequence)
        return self.to_state(record)

    async def history(self, limit: int = 50) -> List[LearningState]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(LearningWeightsRecord)
                    .order_by(LearningWeightsRecord.sequence.desc())
                    .limit(limit)
                )
                return [self.to_state(record) for record in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("读取权重历史失败", error=str(e))
            raise PersistenceError(f"Failed to read weight history: {e}") from e


class LearningStorage:
    """文档、摘要和质量指标存储"""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def _add(self, session: AsyncSession, obj, kind: str):
        try:
            session.add(obj)
            await session.commit()
            await session.refresh(obj)
            return obj
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"{kind}写入失败", error=str(e))
            raise PersistenceError(f"Failed to store {kind}: {e}") from e

    async def store_document(self, document: Document) -> Document:
        """保存文档"""
        if document.extracted_at is None:
            document.extracted_at = utcnow()
        async with self.session_factory() as session:
            document = await self._add(session, document, "document")
        logger.info("文档已记录", document_id=document.id, title=document.title, source=document.source)
        return document

    async def store_summary(self, summary: Summary) -> Summary:
        """保存摘要"""
        if summary.generated_at is None:
            summary.generated_at = utcnow()
        async with self.session_factory() as session:
            summary = await self._add(session, summary, "summary")
        logger.info("摘要已记录", summary_id=summary.id, document_id=summary.document_id)
        return summary

    async def store_metrics(self, metrics: LearningMetricsRecord) -> LearningMetricsRecord:
        """保存质量指标"""
        if metrics.analyzed_at is None:
            metrics.analyzed_at = utcnow()
        async with self.session_factory() as session:
            metrics = await self._add(session, metrics, "metrics")
        logger.info(
            "质量指标已记录",
            metrics_id=metrics.id,
            summary_id=metrics.summary_id,
            overall_score=round(metrics.overall_score, 4),
        )
        return metrics

    async def _get(self, model, record_id: str):
        try:
            async with self.session_factory() as session:
                return await session.get(model, record_id)
        except SQLAlchemyError as e:
            logger.error("读取记录失败", model=model.__tablename__, record_id=record_id, error=str(e))
            raise PersistenceError(f"Failed to read {model.__tablename__}: {e}") from e

    async def get_document(self, document_id: str) -> Optional[Document]:
        return await self._get(Document, document_id)

    async def get_summary(self, summary_id: str) -> Optional[Summary]:
        return await self._get(Summary, summary_id)

    async def _list(self, statement, kind: str) -> list:
        try:
            async with self.session_factory() as session:
                result = await session.execute(statement)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"{kind}查询失败", error=str(e))
            raise PersistenceError(f"Failed to query {kind}: {e}") from e

    async def get_recent_documents(self, limit: int = 50) -> List[Document]:
        """按提取时间倒序获取最近的文档"""
        return await self._list(
            select(Document).order_by(Document.extracted_at.desc()).limit(limit),
            "documents",
        )

    async def get_recent_summaries(self, limit: int = 50) -> List[Summary]:
        return await self._list(
            select(Summary).order_by(Summary.generated_at.desc()).limit(limit),
            "summaries",
        )

    async def list_summaries_for_document(self, document_id: str) -> List[Summary]:
        return await self._list(
            select(Summary)
            .where(Summary.document_id == document_id)
            .order_by(Summary.generated_at.desc()),
            "summaries",
        )

    async def get_recent_metrics(self, limit: int = 50) -> List[LearningMetricsRecord]:
        return await self._list(
            select(LearningMetricsRecord).order_by(LearningMetricsRecord.analyzed_at.desc()).limit(limit),
            "metrics",
        )

    async def get_statistics(self) -> Dict:
        """
        统计数据

        返回文档总数、来源分布、摘要总数、级别分布、平均质量分数
        """
        try:
            async with self.session_factory() as session:
                total_documents = (await session.execute(select(func.count(Document.id)))).scalar_one() or 0
                source_rows = (await session.execute(
                    select(Document.source, func.count(Document.id).label("count"))
                    .group_by(Document.source)
                )).fetchall()
                total_summaries = (await session.execute(select(func.count(Summary.id)))).scalar_one() or 0
                level_rows = (await session.execute(
                    select(Summary.summary_level, func.count(Summary.id).label("count"))
                    .group_by(Summary.summary_level)
                )).fetchall()
                quality_row = (await session.execute(
                    select(
                        func.avg(LearningMetricsRecord.overall_score).label("avg_quality"),
                        func.count(LearningMetricsRecord.id).label("total_analyzed"),
                    )
                )).fetchone()
        except SQLAlchemyError as e:
            logger.error("统计查询失败", error=str(e))
            raise PersistenceError(f"Failed to compute statistics: {e}") from e

        return {
            "total_documents": total_documents,
            "source_distribution": {row.source: row.count for row in source_rows},
            "total_summaries": total_summaries,
            "level_distribution": {row.summary_level: row.count for row in level_rows},
            "quality_statistics": {
                "average_overall_score": round(float(quality_row.avg_quality or 0), 4) if quality_row else 0.0,
                "total_analyzed": quality_row.total_analyzed if quality_row else 0,
            },
        }

    @staticmethod
    def metrics_from_record(record: LearningMetricsRecord) -> QualityMetrics:
        return QualityMetrics(
            coherence=record.coherence_score,
            relevance=record.relevance_score,
            compression_ratio=record.compression_ratio,
            keyword_coverage=record.keyword_coverage,
            sentence_quality=record.sentence_quality,
            overall_score=record.overall_score,
        )
