"""
自学习相关的Pydantic Schema
- 权重向量（带下限）
- 质量指标
- 学习状态（权重 + 版本 + 性能统计）
"""
from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Dict, List, Optional

from pydantic import BaseModel, Field


class SummaryLevel(str, Enum):
    """摘要级别"""
    STUDENT = "student"
    PROFESSOR = "professor"


class DocumentSource(str, Enum):
    """文档来源"""
    UPLOAD = "upload"
    URL = "url"


class WeightVector(BaseModel):
    """句子打分权重向量"""
    position_weight: float = Field(4.0, ge=0)
    length_weight: float = Field(3.0, ge=0)
    keyword_weight: float = Field(1.0, ge=0)
    importance_phrase_weight: float = Field(2.5, ge=0)
    academic_term_weight: float = Field(1.5, ge=0)
    question_weight: float = Field(1.0, ge=0)

    # 每个分量允许的最小值，每次调整后强制执行
    FLOORS: ClassVar[Dict[str, float]] = {
        "position_weight": 1.0,
        "length_weight": 1.0,
        "keyword_weight": 0.5,
        "importance_phrase_weight": 1.0,
        "academic_term_weight": 0.5,
        "question_weight": 0.5,
    }

    def floored(self) -> "WeightVector":
        """返回所有分量不低于下限的新权重向量"""
        values = self.model_dump()
        return WeightVector(**{
            name: max(self.FLOORS[name], value)
            for name, value in values.items()
        })


class QualityMetrics(BaseModel):
    """摘要质量指标（各项均在0-1之间）"""
    coherence: float = Field(ge=0, le=1)
    relevance: float = Field(ge=0, le=1)
    compression_ratio: float = Field(ge=0, le=1)
    keyword_coverage: float = Field(ge=0, le=1)
    sentence_quality: float = Field(ge=0, le=1)
    overall_score: float = Field(ge=0, le=1)

    # 综合得分权重，合计1.0
    OVERALL_WEIGHTS: ClassVar[Dict[str, float]] = {
        "coherence": 0.25,
        "relevance": 0.30,
        "compression_ratio": 0.15,
        "keyword_coverage": 0.20,
        "sentence_quality": 0.10,
    }

    @classmethod
    def from_scores(
        cls,
        coherence: float,
        relevance: float,
        compression_ratio: float,
        keyword_coverage: float,
        sentence_quality: float,
    ) -> "QualityMetrics":
        """由五项子得分构造指标，子得分截断到[0,1]并计算综合得分"""
        scores = {
            "coherence": _clamp(coherence),
            "relevance": _clamp(relevance),
            "compression_ratio": _clamp(compression_ratio),
            "keyword_coverage": _clamp(keyword_coverage),
            "sentence_quality": _clamp(sentence_quality),
        }
        overall = sum(scores[name] * weight for name, weight in cls.OVERALL_WEIGHTS.items())
        return cls(**scores, overall_score=_clamp(overall))


class LearningPerformance(BaseModel):
    """学习性能统计"""
    average_quality: float = Field(0.0, ge=0, le=1)
    documents_processed: int = Field(0, ge=0)
    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class LearningState(BaseModel):
    """学习状态：当前权重 + 版本 + 性能统计"""
    id: Optional[str] = None
    version: str = "1.0.0"
    weights: WeightVector = Field(default_factory=WeightVector)
    performance: LearningPerformance = Field(default_factory=LearningPerformance)

    def bump_patch(self) -> str:
        """返回patch号加一后的版本字符串"""
        parts = self.version.split(".")
        while len(parts) < 3:
            parts.append("0")
        patch = int(parts[2] or 0) + 1
        return f"{parts[0]}.{parts[1]}.{patch}"


class LearningMetricsResponse(BaseModel):
    """质量分析记录响应"""
    id: str
    document_id: str
    summary_id: str
    metrics: QualityMetrics
    detected_issues: List[str]
    improvement_suggestions: List[str]
    analyzed_at: datetime


class LearningCycleResponse(BaseModel):
    """学习周期触发结果"""
    status: str
    version: Optional[str] = None
    documents_in_batch: int = 0
    message: Optional[str] = None


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))
