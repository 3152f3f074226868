"""
URLExtractor测试（使用伪造的HTTP会话，不访问网络）
"""
import pytest
import requests

from app.services.document_extractor import DocumentExtractor
from app.services.url_extractor import URLExtractor
from app.utils.processing_exception import ErrorType, ExtractionError, InputError


class FakeResponse:
    def __init__(self, status_code=200, content=b"", reason="OK"):
        self.status_code = status_code
        self.content = content
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400


class FakeSession:
    """按URL返回预设响应，记录请求"""

    def __init__(self, responses):
        self.responses = responses
        self.requests = []

    def get(self, url, headers=None, timeout=None):
        self.requests.append((url, headers, timeout))
        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        return response


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def fake_extract(monkeypatch):
    """把PDF解析替换为直接解码字节"""
    async def extract(data, timeout=None, progress_callback=None):
        return data.decode("utf-8")

    monkeypatch.setattr(DocumentExtractor, "extract_pdf_bytes", staticmethod(extract))


@pytest.mark.parametrize("url, expected", [
    ("https://example.com/paper.pdf", True),
    ("http://example.com/files/report.PDF?download=1", True),
    ("ftp://example.com/paper.pdf", False),
    ("https://example.com/page.html", False),
    ("not a url", False),
    ("", False),
])
def test_is_valid_pdf_url(url, expected):
    assert URLExtractor.is_valid_pdf_url(url) is expected


def test_extract_title_from_url():
    assert URLExtractor.extract_title_from_url("https://example.com/docs/deep-learning_notes.pdf") == "deep learning notes"
    assert URLExtractor.extract_title_from_url("https://example.com/docs/") is None
    assert URLExtractor.extract_title_from_url("https://example.com/a%20b.pdf") == "a b"


async def test_extract_from_url(fake_extract):
    url = "https://example.com/machine-learning.pdf"
    session = FakeSession({url: FakeResponse(content=b"Extracted body text")})
    extractor = URLExtractor(session=session, timeout=5, user_agent="test-agent")

    text, title = await extractor.extract_from_url(url)

    assert text == "Extracted body text"
    assert title == "machine learning"
    _, headers, timeout = session.requests[0]
    assert headers["Accept"] == "application/pdf"
    assert headers["User-Agent"] == "test-agent"
    assert timeout == 5


async def test_extract_from_url_invalid():
    extractor = URLExtractor(session=FakeSession({}))
    with pytest.raises(InputError) as exc_info:
        await extractor.extract_from_url("https://example.com/index.html")
    assert exc_info.value.error_type == ErrorType.INVALID_URL


async def test_extract_from_url_http_error():
    url = "https://example.com/missing.pdf"
    extractor = URLExtractor(session=FakeSession({url: FakeResponse(404, reason="Not Found")}))

    with pytest.raises(ExtractionError) as exc_info:
        await extractor.extract_from_url(url)

    assert exc_info.value.error_type == ErrorType.TRANSPORT_ERROR
    assert exc_info.value.error_details["status_code"] == 404
    assert "404 Not Found" in exc_info.value.error_message


async def test_extract_from_url_connection_error():
    url = "https://unreachable.example.com/paper.pdf"
    extractor = URLExtractor(session=FakeSession({url: requests.ConnectionError("refused")}))

    with pytest.raises(ExtractionError) as exc_info:
        await extractor.extract_from_url(url)
    assert exc_info.value.error_type == ErrorType.TRANSPORT_ERROR


async def test_batch_extract_sequential_with_delay(fake_extract):
    """批量提取：单项失败不影响其他，成功后等待间隔"""
    ok_first = "https://example.com/first.pdf"
    invalid = "ftp://example.com/second.pdf"
    missing = "https://example.com/third.pdf"
    ok_last = "https://example.com/fourth.pdf"
    session = FakeSession({
        ok_first: FakeResponse(content=b"first text"),
        missing: FakeResponse(500, reason="Server Error"),
        ok_last: FakeResponse(content=b"fourth text"),
    })
    sleep = RecordingSleep()
    extractor = URLExtractor(session=session, sleep=sleep)

    results = await extractor.batch_extract_from_urls([ok_first, invalid, missing, ok_last], delay=0.5)

    assert [result.url for result in results] == [ok_first, invalid, missing, ok_last]
    assert [result.ok for result in results] == [True, False, False, True]
    assert results[0].text == "first text"
    assert results[0].title == "first"
    assert results[1].error == "Invalid PDF URL"
    assert "500" in results[2].error
    assert sleep.delays == [0.5, 0.5]
    assert [request[0] for request in session.requests] == [ok_first, missing, ok_last]


async def test_batch_extract_empty():
    extractor = URLExtractor(session=FakeSession({}), sleep=RecordingSleep())
    assert await extractor.batch_extract_from_urls([]) == []
