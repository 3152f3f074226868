"""
自学习引擎
- 记录文档和摘要
- 摘要质量分析并记录学习指标
- 学习周期：读取最近文档，按调整策略更新权重（同一时刻最多一个周期在运行）
"""
import asyncio
from enum import Enum
from typing import List, NamedTuple, Optional, Set

import structlog

from app.core.config import settings
from app.models.document import Document
from app.models.learning_metrics import LearningMetricsRecord
from app.models.summary import Summary
from app.schemas.learning import (
    DocumentSource,
    LearningState,
    QualityMetrics,
    SummaryLevel,
    WeightVector,
)
from app.services.document_classifier import DocumentClassifier
from app.services.learning_store import LearningStorage, VersionedWeightStore
from app.services.quality_analyzer import QualityAnalyzer
from app.services.summarizer import Summarizer
from app.services.weight_policy import RandomPerturbationPolicy, WeightAdjustmentPolicy
from app.utils.processing_exception import (
    ErrorType,
    InputError,
    LearningCycleError,
    PersistenceError,
)

logger = structlog.get_logger()


class LearningCycleStatus(str, Enum):
    """学习周期结果状态"""
    COMPLETED = "completed"
    SKIPPED_RUNNING = "skipped_running"
    INSUFFICIENT_DATA = "insufficient_data"
    FAILED = "failed"


class LearningCycleResult(NamedTuple):
    status: LearningCycleStatus
    state: Optional[LearningState] = None
    documents_in_batch: int = 0
    message: Optional[str] = None


class SummaryRecordResult(NamedTuple):
    """摘要记录结果，metrics为None表示质量记录写入失败"""
    summary: Summary
    metrics: Optional[QualityMetrics]
    issues: List[str]
    suggestions: List[str]
    metrics_id: Optional[str] = None


class LearningEngine:
    """自学习引擎"""

    INITIAL_VERSION = "1.0.0"

    def __init__(
        self,
        storage: LearningStorage,
        weight_store: VersionedWeightStore,
        policy: Optional[WeightAdjustmentPolicy] = None,
        lookback: Optional[int] = None,
        min_documents: Optional[int] = None,
    ):
        self.storage = storage
        self.weight_store = weight_store
        self.policy = policy or RandomPerturbationPolicy(
            adjustment_factor=settings.LEARNING_ADJUSTMENT_FACTOR,
            quality_increment=settings.LEARNING_QUALITY_INCREMENT,
        )
        self.lookback = lookback or settings.LEARNING_LOOKBACK
        self.min_documents = min_documents or settings.LEARNING_MIN_DOCUMENTS

        # 重入标志：检查和设置之间没有await，在单个事件循环内是原子的
        self._is_learning = False
        self._background_tasks: Set[asyncio.Task] = set()
        self.cycles_completed = 0
        self.last_cycle_status: Optional[LearningCycleStatus] = None

    @property
    def is_learning(self) -> bool:
        return self._is_learning

    async def initialize(self) -> LearningState:
        """确保存在初始权重记录"""
        state = await self.weight_store.get_latest()
        if state is None:
            state = await self.weight_store.append(LearningState(version=self.INITIAL_VERSION))
            logger.info("已初始化默认权重", version=state.version)
        return state

    async def get_current_state(self) -> LearningState:
        """获取当前学习状态，存储为空时返回默认状态"""
        state = await self.weight_store.get_latest()
        return state or LearningState(version=self.INITIAL_VERSION)

    async def get_current_weights(self) -> WeightVector:
        state = await self.get_current_state()
        return state.weights

    # ------------------------------------------------------------------
    # 记录
    # ------------------------------------------------------------------

    async def record_document(
        self,
        text: str,
        source: DocumentSource,
        title: str,
        source_url: Optional[str] = None,
        file_size: Optional[int] = None,
    ) -> Document:
        """
        记录提取成功的文档

        Args:
            text: 规范化后的全文
            source: 来源（upload/url）
            title: 标题
            source_url: 来源URL
            file_size: 原始文件字节数（None则使用文本字节数）
        """
        metadata = DocumentClassifier.build_metadata(text)
        document = Document(
            title=title,
            source=DocumentSource(source).value,
            source_url=source_url,
            plain_text=text,
            file_size=file_size if file_size is not None else len(text.encode("utf-8")),
            **metadata,
        )
        return await self.storage.store_document(document)

    async def record_summary(
        self,
        document_id: str,
        summary_text: str,
        summary_level: SummaryLevel,
        key_phrases: List[str],
        algorithm: str = Summarizer.ALGORITHM,
        analysis_text: Optional[str] = None,
    ) -> SummaryRecordResult:
        """
        记录摘要并分析其质量

        质量分析基于已存储的原文和摘要实际内容；
        质量记录写入失败只记录日志，不影响摘要本身

        Args:
            document_id: 文档ID
            summary_text: 展示给用户的摘要文本
            summary_level: 摘要级别
            key_phrases: 关键词
            algorithm: 算法标识
            analysis_text: 用于质量分析的摘要正文（None则使用summary_text）

        Raises:
            InputError: 文档不存在
            PersistenceError: 摘要写入失败
        """
        document = await self.storage.get_document(document_id)
        if document is None:
            raise InputError(ErrorType.NOT_FOUND, f"Document not found: {document_id}", {"document_id": document_id})

        analyzed = analysis_text if analysis_text is not None else summary_text
        metrics = QualityAnalyzer.analyze(document.plain_text, analyzed, key_phrases)
        issues = QualityAnalyzer.detect_issues(metrics, analyzed)
        suggestions = QualityAnalyzer.generate_improvement_suggestions(metrics, issues)

        summary = await self.storage.store_summary(Summary(
            document_id=document_id,
            summary_text=summary_text,
            summary_level=SummaryLevel(summary_level).value,
            algorithm=algorithm,
            key_phrases=list(key_phrases),
            quality_score=metrics.overall_score,
        ))

        try:
            record = await self.storage.store_metrics(LearningMetricsRecord(
                document_id=document_id,
                summary_id=summary.id,
                coherence_score=metrics.coherence,
                relevance_score=metrics.relevance,
                compression_ratio=metrics.compression_ratio,
                keyword_coverage=metrics.keyword_coverage,
                sentence_quality=metrics.sentence_quality,
                overall_score=metrics.overall_score,
                detected_issues=issues,
                improvement_suggestions=suggestions,
            ))
        except PersistenceError as e:
            logger.error("质量指标记录失败", summary_id=summary.id, error=e.error_message)
            return SummaryRecordResult(summary=summary, metrics=None, issues=issues, suggestions=suggestions)

        return SummaryRecordResult(
            summary=summary,
            metrics=metrics,
            issues=issues,
            suggestions=suggestions,
            metrics_id=record.id,
        )

    # ------------------------------------------------------------------
    # 学习周期
    # ------------------------------------------------------------------

    async def run_learning_cycle(self) -> LearningCycleResult:
        """
        执行一次学习周期

        已有周期在运行时直接返回skipped_running，不做任何写入
        """
        if self._is_learning:
            logger.info("学习周期正在运行，忽略本次触发")
            return LearningCycleResult(status=LearningCycleStatus.SKIPPED_RUNNING)

        self._is_learning = True
        try:
            return await self._run_cycle()
        finally:
            self._is_learning = False

    def trigger_learning_cycle(self) -> Optional[asyncio.Task]:
        """
        非阻塞触发学习周期

        Returns:
            执行周期的Task；已有周期在运行时返回None
        """
        if self._is_learning:
            logger.info("学习周期正在运行，忽略本次触发")
            return None

        # 在创建Task前占用标志，保证同一轮事件循环中的多次触发只产生一个周期
        self._is_learning = True
        task = asyncio.create_task(self._run_claimed_cycle())
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task

    async def _run_claimed_cycle(self) -> LearningCycleResult:
        try:
            return await self._run_cycle()
        finally:
            self._is_learning = False

    async def wait_for_background_cycles(self) -> List[LearningCycleResult]:
        """等待所有后台触发的学习周期结束"""
        if not self._background_tasks:
            return []
        return list(await asyncio.gather(*self._background_tasks))

    async def _run_cycle(self) -> LearningCycleResult:
        result = await self._execute_cycle()
        self.last_cycle_status = result.status
        return result

    async def _execute_cycle(self) -> LearningCycleResult:
        logger.info("开始学习周期", lookback=self.lookback)
        try:
            documents = await self.storage.get_recent_documents(self.lookback)

            if len(documents) < self.min_documents:
                logger.info(
                    "数据不足，跳过学习周期",
                    documents=len(documents),
                    min_documents=self.min_documents
                )
                return LearningCycleResult(
                    status=LearningCycleStatus.INSUFFICIENT_DATA,
                    documents_in_batch=len(documents),
                    message="Not enough data for learning cycle",
                )

            current = await self.weight_store.get_latest()
            if current is None:
                current = await self.initialize()

            new_state = self.policy.adjust(current, documents)
            stored = await self.weight_store.append(new_state)

        except Exception as e:
            error = LearningCycleError(f"Learning cycle failed: {e}", {"cause": type(e).__name__})
            logger.error("学习周期失败", error=error.error_message, cause=type(e).__name__)
            return LearningCycleResult(status=LearningCycleStatus.FAILED, message=error.error_message)

        self.cycles_completed += 1
        logger.info(
            "学习周期完成",
            version=stored.version,
            documents=len(documents),
            average_quality=stored.performance.average_quality,
        )
        return LearningCycleResult(
            status=LearningCycleStatus.COMPLETED,
            state=stored,
            documents_in_batch=len(documents),
        )


_learning_engine: Optional[LearningEngine] = None


def get_learning_engine() -> LearningEngine:
    """获取自学习引擎实例（单例模式）"""
    global _learning_engine
    if _learning_engine is None:
        from app.core.database import AsyncSessionLocal
        from app.services.learning_store import SqlWeightStore

        _learning_engine = LearningEngine(
            storage=LearningStorage(AsyncSessionLocal),
            weight_store=SqlWeightStore(AsyncSessionLocal),
        )
    return _learning_engine
