"""
文档管理API
- PDF上传提取
- URL提取（单个/批量）
- 文档查询
- 摘要生成
"""
from fastapi import APIRouter, UploadFile, File, HTTPException, Depends, status, Query
from typing import List, Optional
import structlog

from app.core.config import settings
from app.models.document import Document
from app.schemas.document import (
    BatchURLItem,
    BatchURLRequest,
    BatchURLResponse,
    DocumentExtractionResponse,
    DocumentMetadata,
    DocumentResponse,
    SummaryRecordResponse,
    SummaryRequest,
    SummaryResponse,
    URLExtractionRequest,
)
from app.schemas.learning import DocumentSource, WeightVector
from app.services.document_extractor import DocumentExtractor
from app.services.learning_engine import LearningEngine, get_learning_engine
from app.services.summarizer import Summarizer
from app.services.url_extractor import URLExtractor, get_url_extractor
from app.utils.file_utils import read_pdf_upload, title_from_filename
from app.utils.processing_exception import PersistenceError, ProcessingException
from app.api.v1.errors import to_http_exception
from app.api.v1.summaries import summary_to_response

logger = structlog.get_logger()
router = APIRouter(prefix="/documents", tags=["documents"])


def document_to_response(document: Document, include_text: bool = False) -> DocumentResponse:
    """ORM文档转换为响应"""
    return DocumentResponse(
        document_id=document.id,
        title=document.title,
        source=document.source,
        source_url=document.source_url,
        file_size=document.file_size,
        extracted_at=document.extracted_at,
        metadata=DocumentMetadata(
            word_count=document.word_count,
            sentence_count=document.sentence_count,
            language=document.language,
            document_type=document.document_type,
        ),
        text=document.plain_text if include_text else None,
    )


async def record_extracted_document(
    engine: LearningEngine,
    text: str,
    source: DocumentSource,
    title: str,
    source_url: Optional[str] = None,
    file_size: Optional[int] = None,
) -> Optional[str]:
    """
    记录提取出的文档（辅助函数）

    文本过短时不记录；存储失败只记录日志，不影响提取结果返回

    Returns:
        文档ID，未记录时返回None
    """
    if len(text) <= settings.MIN_RECORD_TEXT_LENGTH:
        logger.info("提取文本过短，不记录到学习系统", title=title, content_length=len(text))
        return None

    try:
        document = await engine.record_document(
            text, source, title, source_url=source_url, file_size=file_size
        )
        return document.id
    except PersistenceError as e:
        logger.error("文档记录失败", title=title, error=e.error_message)
        return None


@router.post("/upload", response_model=DocumentExtractionResponse, status_code=status.HTTP_201_CREATED)
async def upload_document(
    file: UploadFile = File(...),
    engine: LearningEngine = Depends(get_learning_engine),
):
    """
    上传PDF并提取文本

    提取成功且文本足够长时记录到学习系统
    """
    try:
        content, file_size = await read_pdf_upload(
            file,
            max_size=settings.UPLOAD_MAX_SIZE,
            allowed_extensions=settings.get_allowed_extensions(),
        )
        text = await DocumentExtractor.extract_pdf_bytes(content)
    except ProcessingException as e:
        logger.warning("上传文档提取失败", filename=file.filename, error=e.error_message)
        raise to_http_exception(e)

    title = title_from_filename(file.filename)
    document_id = await record_extracted_document(
        engine, text, DocumentSource.UPLOAD, title, file_size=file_size
    )

    return DocumentExtractionResponse(
        document_id=document_id,
        title=title,
        text=text,
        recorded=document_id is not None,
        message="Document recorded for learning!" if document_id else None,
    )


@router.post("/url", response_model=DocumentExtractionResponse, status_code=status.HTTP_201_CREATED)
async def extract_from_url(
    request: URLExtractionRequest,
    engine: LearningEngine = Depends(get_learning_engine),
    extractor: URLExtractor = Depends(get_url_extractor),
):
    """从URL下载PDF并提取文本"""
    try:
        text, title = await extractor.extract_from_url(request.url)
    except ProcessingException as e:
        logger.warning("URL提取失败", url=request.url, error=e.error_message)
        raise to_http_exception(e)

    document_id = await record_extracted_document(
        engine, text, DocumentSource.URL, title, source_url=request.url.strip()
    )

    return DocumentExtractionResponse(
        document_id=document_id,
        title=title,
        text=text,
        recorded=document_id is not None,
    )


@router.post("/batch-url", response_model=BatchURLResponse)
async def batch_extract_from_urls(
    request: BatchURLRequest,
    engine: LearningEngine = Depends(get_learning_engine),
    extractor: URLExtractor = Depends(get_url_extractor),
):
    """
    批量URL提取

    按顺序处理，单个URL失败不影响其他URL
    """
    urls = [url.strip() for url in request.urls if url.strip()]
    results = await extractor.batch_extract_from_urls(urls)

    items: List[BatchURLItem] = []
    for result in results:
        document_id = None
        if result.ok:
            document_id = await record_extracted_document(
                engine, result.text, DocumentSource.URL, result.title, source_url=result.url
            )
        items.append(BatchURLItem(
            url=result.url,
            title=result.title,
            success=result.ok,
            document_id=document_id,
            text_length=len(result.text),
            error=result.error,
        ))

    succeeded = sum(1 for item in items if item.success)
    return BatchURLResponse(
        total=len(items),
        succeeded=succeeded,
        failed=len(items) - succeeded,
        results=items,
    )


@router.get("", response_model=List[DocumentResponse])
async def list_documents(
    limit: int = Query(50, ge=1, le=1000),
    engine: LearningEngine = Depends(get_learning_engine),
):
    """最近提取的文档列表（按提取时间倒序）"""
    try:
        documents = await engine.storage.get_recent_documents(limit)
    except PersistenceError as e:
        raise to_http_exception(e)
    return [document_to_response(document) for document in documents]


async def _get_document_or_404(engine: LearningEngine, document_id: str) -> Document:
    try:
        document = await engine.storage.get_document(document_id)
    except PersistenceError as e:
        raise to_http_exception(e)
    if document is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Document not found: {document_id}"
        )
    return document


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: str,
    engine: LearningEngine = Depends(get_learning_engine),
):
    """获取文档详情（含全文）"""
    document = await _get_document_or_404(engine, document_id)
    return document_to_response(document, include_text=True)


@router.get("/{document_id}/summaries", response_model=List[SummaryRecordResponse])
async def list_document_summaries(
    document_id: str,
    engine: LearningEngine = Depends(get_learning_engine),
):
    """获取文档的所有摘要"""
    await _get_document_or_404(engine, document_id)
    try:
        summaries = await engine.storage.list_summaries_for_document(document_id)
    except PersistenceError as e:
        raise to_http_exception(e)
    return [summary_to_response(summary) for summary in summaries]


@router.post("/{document_id}/summaries", response_model=SummaryResponse)
async def generate_summary(
    document_id: str,
    request: SummaryRequest,
    engine: LearningEngine = Depends(get_learning_engine),
):
    """
    使用当前学习权重生成摘要

    - 无法生成摘要时返回带状态标签的结果（非错误）
    - 权重读取失败时使用默认权重，weights_version为null
    - 摘要或质量记录写入失败时仍返回摘要，recorded为false
    """
    document = await _get_document_or_404(engine, document_id)

    try:
        state = await engine.get_current_state()
        weights, weights_version = state.weights, state.version
    except PersistenceError as e:
        logger.error("读取学习权重失败，使用默认权重", document_id=document_id, error=e.error_message)
        weights, weights_version = WeightVector(), None

    outcome = Summarizer.summarize(document.plain_text, weights, request.level)

    if not outcome.ok:
        return SummaryResponse(
            status=outcome.status.value,
            document_id=document_id,
            level=request.level,
            summary=outcome.message,
            key_phrases=[],
            message=outcome.message,
            weights_version=weights_version,
        )

    final_summary = Summarizer.format_for_level(outcome.summary, request.level)
    response = SummaryResponse(
        status=outcome.status.value,
        document_id=document_id,
        level=request.level,
        summary=final_summary,
        key_phrases=outcome.key_phrases,
        weights_version=weights_version,
    )

    try:
        record = await engine.record_summary(
            document_id,
            final_summary,
            request.level,
            outcome.key_phrases,
            algorithm=Summarizer.ALGORITHM,
            analysis_text=outcome.summary,
        )
    except ProcessingException as e:
        logger.error("摘要记录失败", document_id=document_id, error=e.error_message)
        return response

    response.summary_id = record.summary.id
    response.recorded = record.metrics is not None
    response.quality = record.metrics
    response.issues = record.issues
    response.suggestions = record.suggestions
    return response
