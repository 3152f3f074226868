"""
TextAnalyzer单元测试
"""
from app.services.text_analyzer import TextAnalyzer


def test_split_sentences_drops_short_fragments():
    """测试句子切分丢弃过短片段"""
    text = "This sentence is long enough to keep. Too short. Another sentence that should stay!"
    sentences = TextAnalyzer.split_sentences(text)
    assert sentences == [
        "This sentence is long enough to keep",
        "Another sentence that should stay",
    ]


def test_split_sentences_empty():
    assert TextAnalyzer.split_sentences("") == []
    assert TextAnalyzer.split_sentences("...!!!???") == []


def test_split_sentences_exact_boundary():
    """长度恰好为15的片段被丢弃，16的保留"""
    assert TextAnalyzer.split_sentences("abcdefghijklmno.") == []
    assert TextAnalyzer.split_sentences("abcdefghijklmnop.") == ["abcdefghijklmnop"]


def test_word_frequency_filters():
    """测试词频过滤：短词、停用词、纯数字"""
    freq = TextAnalyzer.word_frequency("The cache, the CACHE and 2024 data! which data; xyz")
    assert freq == {"cache": 2, "data": 2}


def test_word_frequency_preserves_first_seen_order():
    freq = TextAnalyzer.word_frequency("zebra apple zebra mango apple")
    assert list(freq) == ["zebra", "apple", "mango"]


def test_top_keywords_requires_repetition():
    """只出现一次的词不作为关键词"""
    freq = {"single": 1, "double": 2}
    assert TextAnalyzer.top_keywords(freq) == ["double"]


def test_top_keywords_academic_first():
    """学术词汇排在前面"""
    freq = {"apple": 5, "banana": 4, "evaluation": 3, "cherry": 2}
    assert TextAnalyzer.top_keywords(freq) == ["evaluation", "apple", "banana", "cherry"]


def test_top_keywords_limit():
    freq = {f"word{chr(97 + i)}": 20 - i for i in range(15)}
    keywords = TextAnalyzer.top_keywords(freq)
    assert len(keywords) == TextAnalyzer.MAX_KEYWORDS
    assert keywords[0] == "worda"


def test_top_keywords_stable_on_ties():
    freq = {"gamma": 2, "alpha": 2, "beta": 2}
    assert TextAnalyzer.top_keywords(freq) == ["gamma", "alpha", "beta"]


def test_is_academic_term():
    assert TextAnalyzer.is_academic_term("information")
    assert TextAnalyzer.is_academic_term("methodology")
    assert TextAnalyzer.is_academic_term("casestudy")
    assert not TextAnalyzer.is_academic_term("apple")


def test_analyze(sample_text):
    analysis = TextAnalyzer.analyze(sample_text)
    assert len(analysis.sentences) == 9
    assert analysis.word_freq["caching"] == 3
    assert "eviction" in analysis.top_words
    assert len(analysis.top_words) <= TextAnalyzer.MAX_KEYWORDS
