"""
摘要质量学习指标模型
"""
from sqlalchemy import Column, String, Float, DateTime, ForeignKey, JSON, func, Index
import uuid
from app.core.database import Base


class LearningMetricsRecord(Base):
    """摘要质量指标表（关联文档和摘要）"""
    __tablename__ = "learning_metrics"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    document_id = Column(String(36), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, comment="文档ID")
    summary_id = Column(String(36), ForeignKey("summaries.id", ondelete="CASCADE"), nullable=False, comment="摘要ID")
    coherence_score = Column(Float, nullable=False, comment="连贯性（0-1）")
    relevance_score = Column(Float, nullable=False, comment="相关性（0-1）")
    compression_ratio = Column(Float, nullable=False, comment="压缩比得分（0-1）")
    keyword_coverage = Column(Float, nullable=False, comment="关键词覆盖率（0-1）")
    sentence_quality = Column(Float, nullable=False, comment="句子质量（0-1）")
    overall_score = Column(Float, nullable=False, comment="综合得分（0-1）")
    detected_issues = Column(JSON, nullable=False, default=list, comment="检测到的问题")
    improvement_suggestions = Column(JSON, nullable=False, default=list, comment="改进建议")
    analyzed_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), comment="分析时间")

    __table_args__ = (
        Index('idx_learning_metrics_document_id', 'document_id'),
        Index('idx_learning_metrics_summary_id', 'summary_id'),
        Index('idx_learning_metrics_analyzed_at', 'analyzed_at'),
    )

    def __repr__(self):
        return f"<LearningMetricsRecord(id={self.id}, summary_id={self.summary_id}, overall={self.overall_score})>"
