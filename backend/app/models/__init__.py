"""
数据模型模块
"""
from app.models.document import Document
from app.models.summary import Summary
from app.models.learning_metrics import LearningMetricsRecord
from app.models.learning_weights import LearningWeightsRecord

__all__ = [
    "Document",
    "Summary",
    "LearningMetricsRecord",
    "LearningWeightsRecord",
]
