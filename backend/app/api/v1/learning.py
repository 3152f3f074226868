"""
自学习API
- 当前权重与历史
- 质量分析记录
- 学习统计
- 手动触发学习周期
- 学习数据导出
"""
from fastapi import APIRouter, Depends, Query, status
from typing import List
import structlog

from app.schemas.learning import LearningCycleResponse, LearningMetricsResponse, LearningState
from app.services.learning_engine import LearningCycleStatus, LearningEngine, get_learning_engine
from app.services.learning_store import LearningStorage
from app.services.result_exporter import ResultExporter
from app.utils.processing_exception import PersistenceError
from app.api.v1.errors import to_http_exception

logger = structlog.get_logger()
router = APIRouter(prefix="/learning", tags=["learning"])


@router.get("/weights", response_model=LearningState)
async def get_current_weights(
    engine: LearningEngine = Depends(get_learning_engine),
):
    """获取当前学习状态（权重、版本、性能统计）"""
    try:
        return await engine.get_current_state()
    except PersistenceError as e:
        raise to_http_exception(e)


@router.get("/history", response_model=List[LearningState])
async def get_weight_history(
    limit: int = Query(50, ge=1, le=500),
    engine: LearningEngine = Depends(get_learning_engine),
):
    """权重历史（最新在前）"""
    try:
        return await engine.weight_store.history(limit)
    except PersistenceError as e:
        raise to_http_exception(e)


async def _recent_metrics(engine: LearningEngine, limit: int) -> List[LearningMetricsResponse]:
    records = await engine.storage.get_recent_metrics(limit)
    return [
        LearningMetricsResponse(
            id=record.id,
            document_id=record.document_id,
            summary_id=record.summary_id,
            metrics=LearningStorage.metrics_from_record(record),
            detected_issues=record.detected_issues or [],
            improvement_suggestions=record.improvement_suggestions or [],
            analyzed_at=record.analyzed_at,
        )
        for record in records
    ]


@router.get("/metrics", response_model=List[LearningMetricsResponse])
async def get_recent_metrics(
    limit: int = Query(50, ge=1, le=500),
    engine: LearningEngine = Depends(get_learning_engine),
):
    """最近的摘要质量分析记录"""
    try:
        return await _recent_metrics(engine, limit)
    except PersistenceError as e:
        raise to_http_exception(e)


@router.get("/statistics")
async def get_learning_statistics(
    engine: LearningEngine = Depends(get_learning_engine),
):
    """
    获取学习统计数据

    返回文档总数、来源分布、摘要总数、级别分布、平均质量，以及当前学习状态
    """
    try:
        statistics = await engine.storage.get_statistics()
        state = await engine.get_current_state()
    except PersistenceError as e:
        raise to_http_exception(e)

    statistics["learning"] = {
        "version": state.version,
        "average_quality": state.performance.average_quality,
        "documents_processed": state.performance.documents_processed,
        "last_updated": state.performance.last_updated.isoformat(),
        "is_learning": engine.is_learning,
        "cycles_completed": engine.cycles_completed,
        "last_cycle_status": engine.last_cycle_status.value if engine.last_cycle_status else None,
    }
    return statistics


@router.post("/cycle", response_model=LearningCycleResponse, status_code=status.HTTP_202_ACCEPTED)
async def trigger_learning_cycle(
    engine: LearningEngine = Depends(get_learning_engine),
):
    """
    手动触发一次学习周期（后台执行，不等待结果）

    - started: 已在后台启动
    - skipped_running: 已有周期在运行，本次忽略

    周期结果通过 /learning/statistics 查看
    """
    task = engine.trigger_learning_cycle()
    if task is None:
        return LearningCycleResponse(
            status=LearningCycleStatus.SKIPPED_RUNNING.value,
            message="Learning cycle already running",
        )

    logger.info("手动触发学习周期")
    return LearningCycleResponse(status="started", message="Learning cycle started")


@router.get("/export")
async def export_learning_data(
    limit: int = Query(100, ge=1, le=1000),
    engine: LearningEngine = Depends(get_learning_engine),
):
    """导出学习数据（当前状态、权重历史、最近质量记录、统计）"""
    try:
        current = await engine.get_current_state()
        history = await engine.weight_store.history(limit)
        metrics = await _recent_metrics(engine, limit)
        statistics = await engine.storage.get_statistics()
    except PersistenceError as e:
        raise to_http_exception(e)

    return ResultExporter.export_learning_data(
        current,
        history,
        [item.model_dump(mode="json") for item in metrics],
        statistics,
    )
