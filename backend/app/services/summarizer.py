"""
抽取式摘要服务
基于可调权重的句子打分：位置、长度、关键词、重要短语、学术术语、疑问词
"""
import math
import re
from enum import Enum
from typing import List, NamedTuple, Optional

import structlog

from app.schemas.learning import SummaryLevel, WeightVector
from app.services.text_analyzer import TextAnalyzer

logger = structlog.get_logger()


class SummaryStatus(str, Enum):
    """摘要生成结果状态"""
    OK = "ok"
    EMPTY_INPUT = "empty_input"
    NO_SALIENT_CONTENT = "no_salient_content"


class SummaryOutcome(NamedTuple):
    """摘要生成结果（带状态标签，失败不抛异常）"""
    status: SummaryStatus
    summary: str
    key_phrases: List[str]
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == SummaryStatus.OK


class ScoredSentence(NamedTuple):
    index: int
    sentence: str
    score: float
    word_count: int


class Summarizer:
    """抽取式摘要生成器"""

    ALGORITHM = "intelligent-v2-learning"

    EMPTY_INPUT_MESSAGE = "Unable to generate summary from the extracted text."
    NO_SALIENT_CONTENT_MESSAGE = "Unable to generate a meaningful summary from the extracted text."

    IMPORTANT_PHRASES = [
        "in conclusion", "to summarize", "the main", "key finding", "important",
        "significant", "research shows", "study reveals", "analysis indicates",
        "results suggest", "evidence shows", "data indicates", "findings demonstrate",
    ]

    ACADEMIC_SUFFIXES = [
        re.compile(p) for p in (r"tion$", r"sion$", r"ment$", r"ness$", r"ity$", r"ism$", r"ogy$", r"ics$")
    ]

    QUESTION_WORDS = ["what", "how", "why", "when", "where", "who", "which"]

    # (比例, 最少句数, 最多句数)
    TARGET_SENTENCES = {
        SummaryLevel.PROFESSOR: (0.2, 4, 12),
        SummaryLevel.STUDENT: (0.15, 3, 8),
    }

    @staticmethod
    def score_sentence(
        sentence: str,
        index: int,
        total: int,
        top_words: List[str],
        weights: WeightVector,
    ) -> ScoredSentence:
        """
        计算单个句子的得分（各项加分相互独立，可叠加）

        Args:
            sentence: 句子文本
            index: 句子在文档中的下标
            total: 句子总数
            top_words: 候选关键词
            weights: 权重向量
        """
        score = 0.0
        lower = sentence.lower()
        words = lower.split()
        word_count = len(words)

        # 1. 位置：开头、结尾、中段三个区间独立判断
        if index < total * 0.15:
            score += weights.position_weight
        if index > total * 0.85:
            score += weights.position_weight * 0.75
        if total * 0.4 <= index <= total * 0.6:
            score += weights.position_weight * 0.5

        # 2. 长度
        if 10 <= word_count <= 30:
            score += weights.length_weight
        if 15 <= word_count <= 25:
            score += weights.length_weight * 0.67

        # 3. 关键词：每次命中都加分，不设上限
        keywords = set(top_words)
        for word in words:
            if TextAnalyzer.clean_word(word) in keywords:
                score += weights.keyword_weight

        # 4. 重要短语
        for phrase in Summarizer.IMPORTANT_PHRASES:
            if phrase in lower:
                score += weights.importance_phrase_weight

        # 5. 学术术语
        for word in words:
            if any(pattern.search(word) for pattern in Summarizer.ACADEMIC_SUFFIXES):
                score += weights.academic_term_weight

        # 6. 疑问词（子串匹配）
        for question_word in Summarizer.QUESTION_WORDS:
            if question_word in lower:
                score += weights.question_weight

        return ScoredSentence(index=index, sentence=sentence, score=score, word_count=word_count)

    @staticmethod
    def target_sentence_count(total: int, level: SummaryLevel) -> int:
        """根据摘要级别计算目标句数"""
        ratio, minimum, maximum = Summarizer.TARGET_SENTENCES[SummaryLevel(level)]
        return min(maximum, max(minimum, math.floor(total * ratio)))

    @staticmethod
    def summarize(
        text: str,
        weights: Optional[WeightVector] = None,
        level: SummaryLevel = SummaryLevel.STUDENT,
    ) -> SummaryOutcome:
        """
        生成抽取式摘要

        Args:
            text: 规范化后的全文
            weights: 当前权重（None则使用默认权重）
            level: 摘要级别（student/professor）

        Returns:
            SummaryOutcome，相同输入和权重下结果完全一致
        """
        weights = weights or WeightVector()
        analysis = TextAnalyzer.analyze(text)
        sentences = analysis.sentences

        if not sentences:
            logger.info("没有可用句子，无法生成摘要", text_length=len(text or ""))
            return SummaryOutcome(
                status=SummaryStatus.EMPTY_INPUT,
                summary="",
                key_phrases=[],
                message=Summarizer.EMPTY_INPUT_MESSAGE,
            )

        total = len(sentences)
        scored = [
            Summarizer.score_sentence(sentence, index, total, analysis.top_words, weights)
            for index, sentence in enumerate(sentences)
        ]

        target = Summarizer.target_sentence_count(total, level)

        # 稳定排序：同分时保持原文顺序
        salient = [item for item in scored if item.score > 0]
        salient.sort(key=lambda item: item.score, reverse=True)
        selected = sorted(salient[:target], key=lambda item: item.index)

        if not selected:
            logger.info("没有得分为正的句子", sentences=total)
            return SummaryOutcome(
                status=SummaryStatus.NO_SALIENT_CONTENT,
                summary="",
                key_phrases=[],
                message=Summarizer.NO_SALIENT_CONTENT_MESSAGE,
            )

        summary_text = ". ".join(item.sentence for item in selected) + "."
        key_phrases = analysis.top_words[:TextAnalyzer.MAX_KEYWORDS]

        logger.info(
            "摘要生成完成",
            level=SummaryLevel(level).value,
            sentences=total,
            target=target,
            selected=len(selected),
            summary_length=len(summary_text),
        )
        return SummaryOutcome(status=SummaryStatus.OK, summary=summary_text, key_phrases=key_phrases)

    @staticmethod
    def format_for_level(summary: str, level: SummaryLevel) -> str:
        """为摘要加上级别对应的标题和说明"""
        if SummaryLevel(level) == SummaryLevel.PROFESSOR:
            return (
                f"Academic Summary:\n\n{summary}\n\n"
                "This summary was generated by a self-learning system that continuously "
                "improves based on document analysis and quality feedback."
            )
        return (
            f"Student Summary:\n\n{summary}\n\n"
            "Generated by an adaptive system that learns from each document to provide "
            "better summaries over time."
        )
