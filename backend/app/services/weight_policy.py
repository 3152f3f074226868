"""
权重调整策略
学习周期控制器只依赖WeightAdjustmentPolicy接口，具体调整算法可替换
"""
import random
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional, Sequence

from app.schemas.learning import LearningPerformance, LearningState, WeightVector


class WeightAdjustmentPolicy(ABC):
    """权重调整策略接口"""

    @abstractmethod
    def adjust(self, state: LearningState, documents: Sequence) -> LearningState:
        """
        根据当前状态和最近文档计算新的学习状态

        Args:
            state: 当前学习状态
            documents: 本次学习周期的文档批次

        Returns:
            新的学习状态（版本patch号+1，权重不低于下限）
        """


class RandomPerturbationPolicy(WeightAdjustmentPolicy):
    """
    随机扰动策略

    每个权重分量加上 (random - 0.5) * adjustment_factor 的扰动后取下限；
    平均质量按固定增量向1.0靠近
    """

    def __init__(
        self,
        adjustment_factor: float = 0.05,
        quality_increment: float = 0.01,
        rng: Optional[random.Random] = None,
    ):
        self.adjustment_factor = adjustment_factor
        self.quality_increment = quality_increment
        self.rng = rng or random.Random()

    def perturb(self, weights: WeightVector) -> WeightVector:
        values = weights.model_dump()
        adjusted = {
            name: value + (self.rng.random() - 0.5) * self.adjustment_factor
            for name, value in values.items()
        }
        return WeightVector(**{name: max(0.0, value) for name, value in adjusted.items()}).floored()

    def adjust(self, state: LearningState, documents: Sequence) -> LearningState:
        performance = state.performance
        return LearningState(
            version=state.bump_patch(),
            weights=self.perturb(state.weights),
            performance=LearningPerformance(
                average_quality=min(1.0, performance.average_quality + self.quality_increment),
                documents_processed=performance.documents_processed + len(documents),
                last_updated=datetime.now(timezone.utc),
            ),
        )
