"""
摘要质量评估服务
- 连贯性
- 相关性
- 压缩比
- 关键词覆盖率
- 句子质量
纯函数，结果确定
"""
import re
from typing import Dict, List

import structlog

from app.schemas.learning import QualityMetrics

logger = structlog.get_logger()


class QualityAnalyzer:
    """摘要质量分析器"""

    SENTENCE_SPLIT_PATTERN = re.compile(r"[.!?]+")
    # 保留句末标点的句子切分
    SENTENCE_WITH_END_PATTERN = re.compile(r"[^.!?]+[.!?]*")
    NON_WORD_PATTERN = re.compile(r"[^\w]")
    NUMERIC_PATTERN = re.compile(r"^\d+$")

    TRANSITION_WORDS = [
        "however", "therefore", "furthermore", "moreover", "consequently",
        "thus", "additionally", "meanwhile", "nevertheless", "nonetheless",
        "first", "second", "third", "finally", "in conclusion", "to summarize",
    ]

    STOP_WORDS = frozenset([
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
        "is", "are", "was", "were", "be", "been", "being", "have", "has", "had", "do", "does", "did",
        "will", "would", "could", "should", "may", "might", "must", "can", "this", "that", "these", "those",
    ])

    # 最佳压缩比区间
    OPTIMAL_RATIO_MIN = 0.10
    OPTIMAL_RATIO_MAX = 0.30

    # 问题检测阈值（与建议生成共用，顺序一致）
    THRESHOLDS = {
        "coherence": 0.4,
        "relevance": 0.5,
        "compression_ratio": 0.3,
        "keyword_coverage": 0.4,
        "sentence_quality": 0.6,
    }

    ISSUE_MESSAGES = {
        "coherence": "Low coherence - summary lacks logical flow",
        "relevance": "Low relevance - summary may not capture main content",
        "compression_ratio": "Poor compression ratio - summary may be too long or too short",
        "keyword_coverage": "Low keyword coverage - important terms missing",
        "sentence_quality": "Poor sentence quality - sentences may be too short or malformed",
    }

    SUGGESTIONS = {
        "coherence": [
            "Add more transition words and improve sentence flow",
            "Ensure logical progression of ideas",
        ],
        "relevance": [
            "Focus on main topics and key concepts",
            "Increase weight for important keywords",
        ],
        "compression_ratio": [
            "Adjust sentence selection criteria",
            "Optimize summary length for content density",
        ],
        "keyword_coverage": [
            "Prioritize sentences containing key terms",
            "Improve keyword extraction algorithm",
        ],
        "sentence_quality": [
            "Filter out malformed or very short sentences",
            "Improve sentence scoring for length and structure",
        ],
    }

    BRIEF_SUMMARY_ISSUE = "Summary too brief - needs more sentences"
    GENERATION_ERROR_ISSUE = "Error in summary generation"
    ERROR_MARKERS = ("Unable to", "Error:")
    MIN_SUMMARY_SENTENCES = 3

    @staticmethod
    def split_sentences(text: str) -> List[str]:
        """按句末标点切分，丢弃空片段"""
        return [s for s in QualityAnalyzer.SENTENCE_SPLIT_PATTERN.split(text or "") if s.strip()]

    @staticmethod
    def analyze(original_text: str, summary: str, key_phrases: List[str]) -> QualityMetrics:
        """
        评估摘要质量

        Args:
            original_text: 原文
            summary: 摘要文本
            key_phrases: 关键词

        Returns:
            QualityMetrics（各项已截断到[0,1]）
        """
        original_text = original_text or ""
        summary = summary or ""

        metrics = QualityMetrics.from_scores(
            coherence=QualityAnalyzer.calculate_coherence(summary),
            relevance=QualityAnalyzer.calculate_relevance(original_text, summary),
            compression_ratio=QualityAnalyzer.calculate_compression_ratio(original_text, summary),
            keyword_coverage=QualityAnalyzer.calculate_keyword_coverage(summary, key_phrases),
            sentence_quality=QualityAnalyzer.calculate_sentence_quality(summary),
        )

        logger.debug(
            "摘要质量评估完成",
            overall_score=round(metrics.overall_score, 4),
            coherence=round(metrics.coherence, 4),
            relevance=round(metrics.relevance, 4),
        )
        return metrics

    @staticmethod
    def calculate_coherence(summary: str) -> float:
        """
        连贯性

        过渡词（每个命中+0.1）+ 句长一致性*0.3 + 词汇多样性*0.4
        少于2句时返回0.5
        """
        sentences = QualityAnalyzer.split_sentences(summary)
        if len(sentences) < 2:
            return 0.5

        score = 0.0
        summary_lower = summary.lower()
        for word in QualityAnalyzer.TRANSITION_WORDS:
            if word in summary_lower:
                score += 0.1

        lengths = [len(s) for s in sentences]
        mean = sum(lengths) / len(lengths)
        variance = sum((length - mean) ** 2 for length in lengths) / len(lengths)
        if mean > 0:
            score += max(0.0, 1 - variance / (mean * mean)) * 0.3

        words = summary_lower.split()
        if words:
            score += (len(set(words)) / len(words)) * 0.4

        return min(1.0, score)

    @staticmethod
    def extract_meaningful_words(text: str) -> List[str]:
        """提取有意义的词：长度>=3、非停用词、非纯数字"""
        words = []
        for token in (text or "").split():
            word = QualityAnalyzer.NON_WORD_PATTERN.sub("", token).lower()
            if len(word) < 3:
                continue
            if word in QualityAnalyzer.STOP_WORDS:
                continue
            if QualityAnalyzer.NUMERIC_PATTERN.match(word):
                continue
            words.append(word)
        return words

    @staticmethod
    def normalized_frequency(words: List[str]) -> Dict[str, float]:
        """词频，按最大频率归一化"""
        freq: Dict[str, float] = {}
        for word in words:
            freq[word] = freq.get(word, 0) + 1
        if not freq:
            return freq
        max_freq = max(freq.values())
        return {word: count / max_freq for word, count in freq.items()}

    @staticmethod
    def calculate_relevance(original_text: str, summary: str) -> float:
        """相关性 = 0.6 * 词重叠率 + 0.4 * 语义得分"""
        original_words = QualityAnalyzer.extract_meaningful_words(original_text)
        summary_words = QualityAnalyzer.extract_meaningful_words(summary)

        if not original_words or not summary_words:
            return 0.0

        original_set = set(original_words)
        common = [word for word in summary_words if word in original_set]
        word_overlap = len(common) / len(summary_words)

        original_freq = QualityAnalyzer.normalized_frequency(original_words)
        summary_freq = QualityAnalyzer.normalized_frequency(summary_words)
        semantic_score = sum(
            min(original_freq.get(word, 0.0), summary_freq.get(word, 0.0))
            for word in summary_words
        ) / len(summary_words)

        return word_overlap * 0.6 + semantic_score * 0.4

    @staticmethod
    def calculate_compression_ratio(original_text: str, summary: str) -> float:
        """
        压缩比得分

        比例在[0.1, 0.3]内为1.0；过度压缩按 ratio/0.1 惩罚；压缩不足线性衰减到0
        """
        original_length = len(original_text)
        if original_length == 0:
            return 0.0

        ratio = len(summary) / original_length
        if QualityAnalyzer.OPTIMAL_RATIO_MIN <= ratio <= QualityAnalyzer.OPTIMAL_RATIO_MAX:
            return 1.0
        if ratio < QualityAnalyzer.OPTIMAL_RATIO_MIN:
            return ratio / QualityAnalyzer.OPTIMAL_RATIO_MIN
        return max(0.0, 1 - (ratio - QualityAnalyzer.OPTIMAL_RATIO_MAX) / 0.7)

    @staticmethod
    def calculate_keyword_coverage(summary: str, key_phrases: List[str]) -> float:
        """关键词覆盖率（不区分大小写的子串匹配），无关键词时为0.5"""
        if not key_phrases:
            return 0.5

        summary_lower = summary.lower()
        covered = [phrase for phrase in key_phrases if phrase.lower() in summary_lower]
        return len(covered) / len(key_phrases)

    @staticmethod
    def calculate_sentence_quality(summary: str) -> float:
        """
        句子质量（逐句平均）

        10-25词得1.0，8-30词得0.7，其余0.3；
        首字母大写+0.1，以句末标点结尾+0.1
        """
        sentences = [
            s.strip() for s in QualityAnalyzer.SENTENCE_WITH_END_PATTERN.findall(summary or "")
            if QualityAnalyzer.SENTENCE_SPLIT_PATTERN.sub("", s).strip()
        ]
        if not sentences:
            return 0.0

        total = 0.0
        for sentence in sentences:
            word_count = len(sentence.split())
            if 10 <= word_count <= 25:
                total += 1.0
            elif 8 <= word_count <= 30:
                total += 0.7
            else:
                total += 0.3

            if sentence[0].isupper():
                total += 0.1
            if sentence[-1] in ".!?":
                total += 0.1

        return total / len(sentences)

    @staticmethod
    def detect_issues(metrics: QualityMetrics, summary: str) -> List[str]:
        """
        检测摘要问题

        阈值检查（顺序固定）+ 结构检查（句数过少、包含错误提示）
        """
        issues = [
            QualityAnalyzer.ISSUE_MESSAGES[name]
            for name, threshold in QualityAnalyzer.THRESHOLDS.items()
            if getattr(metrics, name) < threshold
        ]

        if len(QualityAnalyzer.split_sentences(summary)) < QualityAnalyzer.MIN_SUMMARY_SENTENCES:
            issues.append(QualityAnalyzer.BRIEF_SUMMARY_ISSUE)

        if any(marker in (summary or "") for marker in QualityAnalyzer.ERROR_MARKERS):
            issues.append(QualityAnalyzer.GENERATION_ERROR_ISSUE)

        return issues

    @staticmethod
    def generate_improvement_suggestions(metrics: QualityMetrics, issues: List[str]) -> List[str]:
        """根据未达标的指标生成改进建议，顺序与阈值检查一致"""
        suggestions: List[str] = []
        for name, threshold in QualityAnalyzer.THRESHOLDS.items():
            if getattr(metrics, name) < threshold:
                suggestions.extend(QualityAnalyzer.SUGGESTIONS[name])
        return suggestions
