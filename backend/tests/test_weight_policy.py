"""
权重调整策略单元测试
"""
import random

from app.schemas.learning import LearningPerformance, LearningState, WeightVector
from app.services.weight_policy import RandomPerturbationPolicy


class FixedRandom(random.Random):
    """返回固定值的随机数生成器"""

    def __init__(self, value: float):
        super().__init__()
        self.value = value

    def random(self):
        return self.value


def test_adjust_bumps_patch_version():
    policy = RandomPerturbationPolicy(rng=random.Random(1))
    state = LearningState(version="1.0.7")
    new_state = policy.adjust(state, [object()] * 5)
    assert new_state.version == "1.0.8"


def test_adjust_updates_performance():
    policy = RandomPerturbationPolicy(quality_increment=0.01, rng=random.Random(1))
    state = LearningState(performance=LearningPerformance(average_quality=0.5, documents_processed=10))
    new_state = policy.adjust(state, [object()] * 7)
    assert abs(new_state.performance.average_quality - 0.51) < 1e-9
    assert new_state.performance.documents_processed == 17


def test_average_quality_capped():
    policy = RandomPerturbationPolicy(quality_increment=0.05, rng=random.Random(1))
    state = LearningState(performance=LearningPerformance(average_quality=0.99))
    assert policy.adjust(state, []).performance.average_quality == 1.0


def test_weights_never_below_floor():
    """最大负向扰动后所有分量仍不低于下限"""
    policy = RandomPerturbationPolicy(adjustment_factor=10.0, rng=FixedRandom(0.0))
    weights = policy.perturb(WeightVector())
    for name, floor in WeightVector.FLOORS.items():
        assert getattr(weights, name) == floor


def test_perturbation_bounded():
    policy = RandomPerturbationPolicy(adjustment_factor=0.05, rng=FixedRandom(1.0))
    weights = policy.perturb(WeightVector())
    assert abs(weights.position_weight - 4.025) < 1e-9
    assert abs(weights.question_weight - 1.025) < 1e-9


def test_floored_raises_low_weights():
    weights = WeightVector(position_weight=0.2, keyword_weight=0.1).floored()
    assert weights.position_weight == 1.0
    assert weights.keyword_weight == 0.5
    assert weights.length_weight == 3.0


def test_bump_patch_handles_short_versions():
    assert LearningState(version="2").bump_patch() == "2.0.1"
    assert LearningState(version="1.4.9").bump_patch() == "1.4.10"
