"""
TextPreprocessor单元测试
"""
from app.services.text_preprocessor import TextPreprocessor


def test_normalize_collapses_whitespace():
    assert TextPreprocessor.normalize("  Hello\n\n  world\t!  ") == "Hello world !"


def test_normalize_removes_symbols():
    assert TextPreprocessor.normalize("a©b•c") == "abc"


def test_normalize_keeps_basic_punctuation():
    text = "Keep: these, (chars) - \"quoted\" 'single'; ok? yes!"
    assert TextPreprocessor.normalize(text) == text


def test_normalize_empty():
    assert TextPreprocessor.normalize("") == ""
    assert TextPreprocessor.normalize(None) == ""


def test_join_pages():
    """页面之间以单个空格拼接，空页被跳过"""
    assert TextPreprocessor.join_pages(["Page one.", "", "Page\ntwo."]) == "Page one. Page two."
    assert TextPreprocessor.join_pages([]) == ""
