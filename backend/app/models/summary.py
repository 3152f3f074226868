"""
摘要模型
"""
from sqlalchemy import Column, String, Float, DateTime, ForeignKey, Text, JSON, func, Index
from sqlalchemy.orm import relationship
import uuid
from app.core.database import Base


class Summary(Base):
    """摘要表（每次生成请求创建一条，之后不再修改）"""
    __tablename__ = "summaries"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    document_id = Column(String(36), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, comment="文档ID")
    summary_text = Column(Text, nullable=False, comment="摘要文本")
    summary_level = Column(String(20), nullable=False, comment="摘要级别（student/professor）")
    generated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), comment="生成时间")
    algorithm = Column(String(100), nullable=False, comment="算法标识")
    key_phrases = Column(JSON, nullable=False, default=list, comment="关键词（有序）")
    quality_score = Column(Float, nullable=True, comment="综合质量分数（0-1）")
    user_feedback = Column(String(20), nullable=True, comment="用户反馈（positive/negative/neutral）")

    # 关系
    document = relationship("Document", backref="summaries")

    __table_args__ = (
        Index('idx_summaries_document_id', 'document_id'),
        Index('idx_summaries_generated_at', 'generated_at'),
    )

    def __repr__(self):
        return f"<Summary(id={self.id}, document_id={self.document_id}, level={self.summary_level})>"
