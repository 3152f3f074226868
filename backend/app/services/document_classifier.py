"""
文档元数据识别服务
基于规则的语言检测和文档类型识别
"""
import re
from typing import Dict

import structlog

logger = structlog.get_logger()


class DocumentClassifier:
    """文档分类器"""

    # 常见英文功能词
    ENGLISH_WORDS = frozenset([
        'the', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for', 'of', 'with', 'by'
    ])
    LANGUAGE_SAMPLE_WORDS = 100
    ENGLISH_RATIO_THRESHOLD = 0.1

    # 学术文档关键词
    ACADEMIC_KEYWORDS = [
        'abstract', 'introduction', 'methodology', 'results', 'conclusion', 'references'
    ]

    # 商业文档关键词
    BUSINESS_KEYWORDS = [
        'executive', 'summary', 'revenue', 'profit', 'strategy', 'market'
    ]

    # 技术文档关键词
    TECHNICAL_KEYWORDS = [
        'algorithm', 'implementation', 'system', 'architecture', 'framework'
    ]

    SENTENCE_PATTERN = re.compile(r"[.!?]+")

    @staticmethod
    def detect_language(content: str) -> str:
        """
        简单语言检测

        Returns:
            前100个词中英文功能词占比超过10%返回en，否则unknown
        """
        words = content.lower().split()[:DocumentClassifier.LANGUAGE_SAMPLE_WORDS]
        if not words:
            return "unknown"

        english_count = sum(1 for word in words if word in DocumentClassifier.ENGLISH_WORDS)
        return "en" if english_count > len(words) * DocumentClassifier.ENGLISH_RATIO_THRESHOLD else "unknown"

    @staticmethod
    def detect_document_type(content: str) -> str:
        """
        基于关键词命中数的文档类型识别

        Returns:
            academic/business/technical/general（无任何命中为general；同分时优先academic，其次business）
        """
        content_lower = content.lower()

        academic_score = sum(1 for keyword in DocumentClassifier.ACADEMIC_KEYWORDS
                             if keyword in content_lower)
        business_score = sum(1 for keyword in DocumentClassifier.BUSINESS_KEYWORDS
                             if keyword in content_lower)
        technical_score = sum(1 for keyword in DocumentClassifier.TECHNICAL_KEYWORDS
                              if keyword in content_lower)

        # 全零分不参与同分规则，否则无关键词的文本会被归为academic
        if academic_score + business_score + technical_score == 0:
            return "general"
        if academic_score >= business_score and academic_score >= technical_score:
            return "academic"
        if business_score >= technical_score:
            return "business"
        return "technical"

    @staticmethod
    def build_metadata(content: str) -> Dict:
        """
        生成文档元数据

        Returns:
            {"word_count", "sentence_count", "language", "document_type"}
        """
        metadata = {
            "word_count": len(content.split()),
            "sentence_count": len([
                s for s in DocumentClassifier.SENTENCE_PATTERN.split(content) if s.strip()
            ]),
            "language": DocumentClassifier.detect_language(content),
            "document_type": DocumentClassifier.detect_document_type(content),
        }
        logger.debug("文档元数据识别完成", **metadata)
        return metadata
