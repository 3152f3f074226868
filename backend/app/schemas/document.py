"""
文档和摘要相关的Pydantic Schema
"""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional

from app.schemas.learning import QualityMetrics, SummaryLevel


class DocumentMetadata(BaseModel):
    """文档元数据"""
    word_count: int
    sentence_count: int
    language: Optional[str] = None
    document_type: Optional[str] = None


class DocumentResponse(BaseModel):
    """文档信息响应"""
    document_id: str
    title: str
    source: str
    source_url: Optional[str] = None
    file_size: int
    extracted_at: datetime
    metadata: DocumentMetadata
    text: Optional[str] = Field(None, description="提取的纯文本（列表接口不返回）")


class DocumentExtractionResponse(BaseModel):
    """提取响应（上传或URL）"""
    document_id: Optional[str] = Field(None, description="文本过短未记录时为空")
    title: str
    text: str
    recorded: bool
    message: Optional[str] = None


class URLExtractionRequest(BaseModel):
    """URL提取请求"""
    url: str


class BatchURLRequest(BaseModel):
    """批量URL提取请求"""
    urls: List[str] = Field(min_length=1)


class BatchURLItem(BaseModel):
    """批量提取单项结果"""
    url: str
    title: str
    success: bool
    document_id: Optional[str] = None
    text_length: int = 0
    error: Optional[str] = None


class BatchURLResponse(BaseModel):
    """批量提取响应"""
    total: int
    succeeded: int
    failed: int
    results: List[BatchURLItem]


class SummaryRequest(BaseModel):
    """摘要生成请求"""
    level: SummaryLevel = SummaryLevel.STUDENT


class SummaryResponse(BaseModel):
    """摘要生成响应"""
    status: str = Field(description="ok/empty_input/no_salient_content")
    document_id: str
    summary_id: Optional[str] = None
    level: SummaryLevel
    summary: str
    key_phrases: List[str]
    message: Optional[str] = None
    recorded: bool = False
    weights_version: Optional[str] = None
    quality: Optional[QualityMetrics] = None
    issues: List[str] = []
    suggestions: List[str] = []


class SummaryRecordResponse(BaseModel):
    """已存储摘要响应"""
    summary_id: str
    document_id: str
    summary: str
    level: str
    algorithm: str
    key_phrases: List[str]
    quality_score: Optional[float] = None
    user_feedback: Optional[str] = None
    generated_at: datetime
