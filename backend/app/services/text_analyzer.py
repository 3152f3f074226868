"""
文本分析服务
- 句子切分
- 词频统计
- 候选关键词提取
纯函数，无副作用
"""
import re
from typing import Dict, List, NamedTuple


class TextAnalysis(NamedTuple):
    """文本分析结果"""
    sentences: List[str]
    word_freq: Dict[str, int]
    top_words: List[str]


class TextAnalyzer:
    """文本分析器"""

    SENTENCE_SPLIT_PATTERN = re.compile(r"[.!?]+")
    NON_WORD_PATTERN = re.compile(r"[^\w]")
    NUMERIC_PATTERN = re.compile(r"^\d+$")
    HAS_LETTER_PATTERN = re.compile(r"[a-z]")

    MIN_SENTENCE_LENGTH = 15  # 去除首尾空白后长度不超过该值的片段被丢弃
    MIN_WORD_LENGTH = 4
    MIN_KEYWORD_FREQUENCY = 2
    CANDIDATE_KEYWORDS = 12
    MAX_KEYWORDS = 8

    STOP_WORDS = frozenset([
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
        "is", "are", "was", "were", "be", "been", "being", "have", "has", "had", "do", "does", "did",
        "will", "would", "could", "should", "may", "might", "must", "can", "this", "that", "these",
        "those", "from", "into", "than", "then", "them", "they", "their", "there", "what", "when",
        "where", "which", "while", "with", "also", "such", "some", "more", "most", "other", "only",
        "very", "each", "both", "about", "over", "after", "before", "between", "through", "during",
        "under", "because", "however", "within", "without", "your", "yours", "ours", "here",
    ])

    # 学术词汇模式：常见名词化后缀，或包含研究类词根
    ACADEMIC_PATTERNS = [
        re.compile(p) for p in (
            r"tion$", r"sion$", r"ment$", r"ness$", r"ity$", r"ism$", r"ogy$", r"ics$",
            r"analysis", r"research", r"study", r"method", r"theory", r"concept",
        )
    ]

    @staticmethod
    def split_sentences(text: str) -> List[str]:
        """
        按 . ! ? 切分句子，保持文档顺序

        Returns:
            去除首尾空白、长度大于15的句子列表
        """
        if not text:
            return []

        sentences = []
        for fragment in TextAnalyzer.SENTENCE_SPLIT_PATTERN.split(text):
            fragment = fragment.strip()
            if len(fragment) > TextAnalyzer.MIN_SENTENCE_LENGTH:
                sentences.append(fragment)
        return sentences

    @staticmethod
    def clean_word(word: str) -> str:
        """去除单词中的非单词字符并转小写"""
        return TextAnalyzer.NON_WORD_PATTERN.sub("", word).lower()

    @staticmethod
    def word_frequency(text: str) -> Dict[str, int]:
        """
        统计词频

        仅保留长度>=4、非停用词、非纯数字且包含字母的词；
        字典顺序为首次出现顺序
        """
        freq: Dict[str, int] = {}
        if not text:
            return freq

        for token in text.lower().split():
            word = TextAnalyzer.clean_word(token)
            if len(word) < TextAnalyzer.MIN_WORD_LENGTH:
                continue
            if word in TextAnalyzer.STOP_WORDS:
                continue
            if TextAnalyzer.NUMERIC_PATTERN.match(word):
                continue
            if not TextAnalyzer.HAS_LETTER_PATTERN.search(word):
                continue
            freq[word] = freq.get(word, 0) + 1
        return freq

    @staticmethod
    def is_academic_term(word: str) -> bool:
        return any(pattern.search(word) for pattern in TextAnalyzer.ACADEMIC_PATTERNS)

    @staticmethod
    def top_keywords(frequency: Dict[str, int]) -> List[str]:
        """
        提取候选关键词

        1. 过滤出现次数>=2的词，按频率降序（稳定排序，同频保持首次出现顺序）
        2. 取前12个
        3. 学术词汇提到最前，去重后截取前8个
        """
        frequent = [
            (word, count) for word, count in frequency.items()
            if count >= TextAnalyzer.MIN_KEYWORD_FREQUENCY
        ]
        frequent.sort(key=lambda item: item[1], reverse=True)
        meaningful = [word for word, _ in frequent[:TextAnalyzer.CANDIDATE_KEYWORDS]]

        academic = [word for word in meaningful if TextAnalyzer.is_academic_term(word)]

        ranked: List[str] = []
        for word in academic + meaningful:
            if word not in ranked:
                ranked.append(word)
        return ranked[:TextAnalyzer.MAX_KEYWORDS]

    @staticmethod
    def analyze(text: str) -> TextAnalysis:
        """完整分析：句子、词频、候选关键词"""
        word_freq = TextAnalyzer.word_frequency(text)
        return TextAnalysis(
            sentences=TextAnalyzer.split_sentences(text),
            word_freq=word_freq,
            top_words=TextAnalyzer.top_keywords(word_freq),
        )
