"""
文档模型
"""
from sqlalchemy import Column, String, BigInteger, Integer, DateTime, Text, func, Index
import uuid
from app.core.database import Base


class Document(Base):
    """文档表（提取成功后创建，之后不再修改）"""
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False, comment="文档标题")
    source = Column(String(20), nullable=False, comment="来源（upload/url）")
    source_url = Column(String(2048), nullable=True, comment="来源URL（仅url来源）")
    plain_text = Column(Text, nullable=False, comment="提取并规范化后的纯文本")
    extracted_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), comment="提取时间")
    file_size = Column(BigInteger, nullable=False, comment="文件大小（字节）")
    word_count = Column(Integer, nullable=False, default=0, comment="词数")
    sentence_count = Column(Integer, nullable=False, default=0, comment="句子数")
    language = Column(String(20), nullable=True, comment="检测到的语言（en/unknown）")
    document_type = Column(String(50), nullable=True, comment="检测到的文档类型（academic/business/technical/general）")

    __table_args__ = (
        Index('idx_documents_source', 'source'),
        Index('idx_documents_extracted_at', 'extracted_at'),
    )

    def __repr__(self):
        return f"<Document(id={self.id}, title={self.title}, source={self.source})>"
