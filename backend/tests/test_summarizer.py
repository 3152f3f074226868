"""
Summarizer单元测试
"""
from app.schemas.learning import SummaryLevel, WeightVector
from app.services.summarizer import Summarizer, SummaryStatus
from app.services.text_analyzer import TextAnalyzer


def _sentence_count(summary: str) -> int:
    return len(summary.rstrip(".").split(". "))


def test_summarize_selects_boosted_sentences():
    """测试位置和重要短语加分的句子被选中，过短句子被丢弃"""
    text = (
        "This is the first important sentence about research. "
        "A short one. "
        "Finally, in conclusion, the study reveals significant findings."
    )
    outcome = Summarizer.summarize(text, WeightVector(), SummaryLevel.STUDENT)

    assert outcome.status == SummaryStatus.OK
    assert outcome.summary == (
        "This is the first important sentence about research. "
        "Finally, in conclusion, the study reveals significant findings."
    )


def test_summarize_is_deterministic(sample_text):
    """相同输入和权重得到完全相同的结果"""
    first = Summarizer.summarize(sample_text, WeightVector(), SummaryLevel.PROFESSOR)
    second = Summarizer.summarize(sample_text, WeightVector(), SummaryLevel.PROFESSOR)
    assert first == second


def test_summarize_keeps_document_order(sample_text):
    outcome = Summarizer.summarize(sample_text)
    sentences = outcome.summary.rstrip(".").split(". ")
    positions = [sample_text.index(sentence) for sentence in sentences]
    assert positions == sorted(positions)


def test_summarize_levels(sample_text):
    """professor级别比student级别选出更多句子"""
    student = Summarizer.summarize(sample_text, level=SummaryLevel.STUDENT)
    professor = Summarizer.summarize(sample_text, level=SummaryLevel.PROFESSOR)
    assert _sentence_count(student.summary) == 3
    assert _sentence_count(professor.summary) == 4


def test_summarize_key_phrases(sample_text):
    outcome = Summarizer.summarize(sample_text)
    assert outcome.key_phrases == TextAnalyzer.analyze(sample_text).top_words


def test_summarize_empty_input():
    """没有可用句子时返回empty_input状态"""
    for text in ("", "Short. Tiny!"):
        outcome = Summarizer.summarize(text)
        assert outcome.status == SummaryStatus.EMPTY_INPUT
        assert not outcome.ok
        assert outcome.summary == ""
        assert outcome.key_phrases == []
        assert outcome.message == Summarizer.EMPTY_INPUT_MESSAGE


def test_summarize_no_salient_content(sample_text):
    """所有句子得分为0时返回no_salient_content状态"""
    zero = WeightVector(
        position_weight=0,
        length_weight=0,
        keyword_weight=0,
        importance_phrase_weight=0,
        academic_term_weight=0,
        question_weight=0,
    )
    outcome = Summarizer.summarize(sample_text, zero)
    assert outcome.status == SummaryStatus.NO_SALIENT_CONTENT
    assert outcome.message == Summarizer.NO_SALIENT_CONTENT_MESSAGE


def test_score_sentence_components():
    """测试中段位置加分和疑问词加分"""
    scored = Summarizer.score_sentence("What is it", 5, 10, [], WeightVector())
    assert scored.score == 3.0
    assert scored.word_count == 3


def test_score_sentence_keyword_hits_accumulate():
    weights = WeightVector(
        position_weight=0,
        length_weight=0,
        keyword_weight=1.0,
        importance_phrase_weight=0,
        academic_term_weight=0,
        question_weight=0,
    )
    scored = Summarizer.score_sentence("cache cache cache", 3, 10, ["cache"], weights)
    assert scored.score == 3.0


def test_target_sentence_count():
    assert Summarizer.target_sentence_count(2, SummaryLevel.STUDENT) == 3
    assert Summarizer.target_sentence_count(100, SummaryLevel.STUDENT) == 8
    assert Summarizer.target_sentence_count(10, SummaryLevel.PROFESSOR) == 4
    assert Summarizer.target_sentence_count(40, SummaryLevel.PROFESSOR) == 8
    assert Summarizer.target_sentence_count(1000, SummaryLevel.PROFESSOR) == 12


def test_format_for_level():
    assert Summarizer.format_for_level("Body.", SummaryLevel.PROFESSOR).startswith("Academic Summary:\n\nBody.")
    assert Summarizer.format_for_level("Body.", SummaryLevel.STUDENT).startswith("Student Summary:\n\nBody.")
