"""
学习权重模型（只追加，最新一条即当前权重）
"""
from sqlalchemy import Column, String, Integer, Float, DateTime, func
import uuid
from app.core.database import Base


class LearningWeightsRecord(Base):
    """
    学习权重表

    - 每次调整写入一条新记录，不修改旧记录
    - sequence最大的记录为当前权重
    """
    __tablename__ = "learning_weights"

    sequence = Column(Integer, primary_key=True, autoincrement=True, comment="写入顺序")
    id = Column(String(36), nullable=False, unique=True, default=lambda: str(uuid.uuid4()), comment="记录ID")
    version = Column(String(50), nullable=False, comment="语义化版本（major.minor.patch）")

    position_weight = Column(Float, nullable=False, comment="位置权重")
    length_weight = Column(Float, nullable=False, comment="长度权重")
    keyword_weight = Column(Float, nullable=False, comment="关键词权重")
    importance_phrase_weight = Column(Float, nullable=False, comment="重要短语权重")
    academic_term_weight = Column(Float, nullable=False, comment="学术术语权重")
    question_weight = Column(Float, nullable=False, comment="疑问词权重")

    average_quality = Column(Float, nullable=False, default=0.0, comment="平均质量（0-1）")
    documents_processed = Column(Integer, nullable=False, default=0, comment="累计处理文档数")
    last_updated = Column(DateTime(timezone=True), nullable=False, comment="最后更新时间")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), comment="创建时间")

    def __repr__(self):
        return f"<LearningWeightsRecord(sequence={self.sequence}, version={self.version})>"
