"""
基于URL的PDF提取服务
- URL校验（http/https且包含.pdf）
- 下载PDF并提取文本
- 批量提取（严格顺序执行，间隔固定时间）
"""
import asyncio
import re
from typing import Awaitable, Callable, List, NamedTuple, Optional, Tuple
from urllib.parse import unquote, urlparse

import requests
import structlog

from app.core.config import settings
from app.services.document_extractor import DocumentExtractor
from app.utils.processing_exception import ErrorType, ExtractionError, InputError, ProcessingException

logger = structlog.get_logger()


class BatchItemResult(NamedTuple):
    """批量提取的单项结果"""
    url: str
    text: str
    title: str
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class URLExtractor:
    """URL PDF提取器"""

    DEFAULT_TITLE = "Untitled Document"

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else settings.URL_FETCH_TIMEOUT
        self.user_agent = user_agent or settings.PDF_USER_AGENT
        self._sleep = sleep

    @staticmethod
    def is_valid_pdf_url(url: str) -> bool:
        """协议为http/https，且URL中包含.pdf"""
        try:
            parsed = urlparse(url)
        except (TypeError, ValueError):
            return False
        return (
            parsed.scheme in ("http", "https")
            and bool(parsed.netloc)
            and ".pdf" in url.lower()
        )

    @staticmethod
    def extract_title_from_url(url: str) -> Optional[str]:
        """由URL的文件名生成标题，- 和 _ 替换为空格"""
        try:
            path = urlparse(url).path
        except (TypeError, ValueError):
            return None

        filename = unquote(path.rsplit("/", 1)[-1])
        if filename and "." in filename:
            title = re.sub(r"[-_]", " ", filename.split(".")[0]).strip()
            return title or None
        return None

    def _fetch(self, url: str) -> bytes:
        """同步下载（在线程池中执行）"""
        try:
            response = self.session.get(
                url,
                headers={
                    "Accept": "application/pdf",
                    "User-Agent": self.user_agent,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ExtractionError(
                ErrorType.TRANSPORT_ERROR,
                f"Failed to fetch PDF: {e}",
                {"url": url},
            ) from e

        if not response.ok:
            raise ExtractionError(
                ErrorType.TRANSPORT_ERROR,
                f"Failed to fetch PDF: {response.status_code} {response.reason}",
                {"url": url, "status_code": response.status_code},
            )
        return response.content

    async def fetch_pdf(self, url: str) -> bytes:
        """下载PDF原始字节（不阻塞事件循环）"""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._fetch, url)

    async def extract_from_url(self, url: str) -> Tuple[str, str]:
        """
        从URL提取PDF文本

        Returns:
            (规范化后的文本, 标题)

        Raises:
            InputError: URL不合法或提取文本为空
            ExtractionError: 下载或解析失败
        """
        url = (url or "").strip()
        if not self.is_valid_pdf_url(url):
            raise InputError(ErrorType.INVALID_URL, "Invalid PDF URL", {"url": url})

        logger.info("开始从URL提取PDF", url=url)
        data = await self.fetch_pdf(url)
        text = await DocumentExtractor.extract_pdf_bytes(data)
        title = self.extract_title_from_url(url) or self.DEFAULT_TITLE

        logger.info("URL提取成功", url=url, title=title, content_length=len(text), size=len(data))
        return text, title

    async def batch_extract_from_urls(
        self,
        urls: List[str],
        delay: Optional[float] = None,
    ) -> List[BatchItemResult]:
        """
        批量提取（严格顺序，成功后间隔delay秒，单项失败不影响整体）

        Args:
            urls: URL列表
            delay: 间隔秒数，None则使用配置值

        Returns:
            每个URL的提取结果
        """
        delay = settings.BATCH_URL_DELAY_SECONDS if delay is None else delay
        results: List[BatchItemResult] = []

        for url in urls:
            try:
                text, title = await self.extract_from_url(url)
                results.append(BatchItemResult(url=url, text=text, title=title))

                # 避免压垮远端服务器
                await self._sleep(delay)

            except ProcessingException as e:
                logger.warning("批量提取单项失败", url=url, error=e.error_message)
                results.append(BatchItemResult(url=url, text="", title="", error=e.error_message))

        logger.info(
            "批量URL提取完成",
            total=len(urls),
            succeeded=sum(1 for r in results if r.ok),
        )
        return results


def get_url_extractor() -> URLExtractor:
    """获取URL提取器实例"""
    return URLExtractor()
