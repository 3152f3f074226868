"""
摘要查询与导出API
"""
from fastapi import APIRouter, HTTPException, Depends, status, Query
from fastapi.responses import PlainTextResponse, StreamingResponse
import structlog

from app.models.summary import Summary
from app.schemas.document import SummaryRecordResponse
from app.schemas.learning import SummaryLevel
from app.services.learning_engine import LearningEngine, get_learning_engine
from app.services.result_exporter import ResultExporter
from app.utils.processing_exception import PersistenceError
from app.api.v1.errors import to_http_exception

logger = structlog.get_logger()
router = APIRouter(prefix="/summaries", tags=["summaries"])


def summary_to_response(summary: Summary) -> SummaryRecordResponse:
    return SummaryRecordResponse(
        summary_id=summary.id,
        document_id=summary.document_id,
        summary=summary.summary_text,
        level=summary.summary_level,
        algorithm=summary.algorithm,
        key_phrases=summary.key_phrases or [],
        quality_score=summary.quality_score,
        user_feedback=summary.user_feedback,
        generated_at=summary.generated_at,
    )


async def _get_summary_or_404(engine: LearningEngine, summary_id: str) -> Summary:
    try:
        summary = await engine.storage.get_summary(summary_id)
    except PersistenceError as e:
        raise to_http_exception(e)
    if summary is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Summary not found: {summary_id}"
        )
    return summary


@router.get("/{summary_id}", response_model=SummaryRecordResponse)
async def get_summary(
    summary_id: str,
    engine: LearningEngine = Depends(get_learning_engine),
):
    """获取已存储的摘要"""
    summary = await _get_summary_or_404(engine, summary_id)
    return summary_to_response(summary)


@router.get("/{summary_id}/export")
async def export_summary(
    summary_id: str,
    export_format: str = Query("txt", alias="format", pattern="^(txt|pdf)$"),
    engine: LearningEngine = Depends(get_learning_engine),
):
    """
    导出摘要

    - txt: 摘要正文，有关键词时附加关键词块
    - pdf: 分页PDF
    """
    summary = await _get_summary_or_404(engine, summary_id)
    level = SummaryLevel(summary.summary_level)
    key_phrases = summary.key_phrases or []
    filename = ResultExporter.export_filename(level, export_format)
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}

    if export_format == "pdf":
        try:
            buffer = ResultExporter.export_summary_pdf(summary.summary_text, key_phrases, level)
        except Exception as e:
            logger.error("摘要PDF导出失败", summary_id=summary_id, error=str(e))
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"导出失败: {e}"
            )
        return StreamingResponse(buffer, media_type="application/pdf", headers=headers)

    content = ResultExporter.export_summary_text(summary.summary_text, key_phrases)
    return PlainTextResponse(content, headers=headers)
