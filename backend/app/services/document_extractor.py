"""
PDF内容提取服务
逐页提取，单页失败跳过，整个文档失败向上抛出
"""
import asyncio
import concurrent.futures
import io
from typing import Callable, List, Optional

import pdfplumber
import structlog

from app.services.text_preprocessor import TextPreprocessor
from app.utils.processing_exception import ErrorType, ExtractionError, InputError

logger = structlog.get_logger()


class DocumentExtractor:
    """PDF内容提取器"""

    # 超时配置
    PDF_EXTRACTION_TIMEOUT = 120  # PDF提取总超时：2分钟
    PDF_PAGE_TIMEOUT = 5  # 单页提取超时：5秒
    MAX_PDF_PAGES = 500  # 最大处理页数（超过则截断）

    @staticmethod
    async def extract_pages(
        data: bytes,
        progress_callback: Optional[Callable[[int, int], None]] = None
    ) -> List[str]:
        """
        逐页提取PDF文本

        Args:
            data: PDF原始字节
            progress_callback: 进度回调函数 (current_page, total_pages)

        Returns:
            按页顺序的文本块（失败的页被跳过）
        """
        loop = asyncio.get_running_loop()
        page_texts: List[str] = []

        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
            pdf = await loop.run_in_executor(executor, pdfplumber.open, io.BytesIO(data))
            try:
                total_pages = len(pdf.pages)
                if total_pages > DocumentExtractor.MAX_PDF_PAGES:
                    logger.warning(
                        "PDF页数过多，将截断处理",
                        total_pages=total_pages,
                        max_pages=DocumentExtractor.MAX_PDF_PAGES
                    )
                    total_pages = DocumentExtractor.MAX_PDF_PAGES

                def extract_page_text(p):
                    return p.extract_text() or ""

                for page_num, page in enumerate(pdf.pages[:total_pages], 1):
                    try:
                        page_text = await asyncio.wait_for(
                            loop.run_in_executor(executor, extract_page_text, page),
                            timeout=DocumentExtractor.PDF_PAGE_TIMEOUT
                        )
                        if page_text:
                            page_texts.append(page_text)
                    except asyncio.TimeoutError:
                        logger.warning(
                            f"PDF第{page_num}页提取超时，跳过",
                            page_num=page_num,
                            timeout=DocumentExtractor.PDF_PAGE_TIMEOUT
                        )
                    except Exception as e:
                        logger.warning(
                            f"PDF第{page_num}页提取失败，跳过",
                            page_num=page_num,
                            error=str(e)
                        )

                    if progress_callback:
                        progress_callback(page_num, total_pages)
            finally:
                pdf.close()

        return page_texts

    @staticmethod
    async def extract_pdf_bytes(
        data: bytes,
        timeout: float = PDF_EXTRACTION_TIMEOUT,
        progress_callback: Optional[Callable[[int, int], None]] = None
    ) -> str:
        """
        提取PDF全文（带超时保护）

        页面之间以单个空格拼接，并做文本规范化

        Raises:
            InputError: 提取结果为空
            ExtractionError: 整个文档无法读取或超时
        """
        try:
            pages = await asyncio.wait_for(
                DocumentExtractor.extract_pages(data, progress_callback),
                timeout=timeout
            )
        except asyncio.TimeoutError:
            logger.error("PDF提取总超时", timeout=timeout, size=len(data))
            raise ExtractionError(
                ErrorType.EXTRACTION_FAILED,
                f"PDF extraction timed out after {timeout} seconds",
                {"timeout": timeout},
            )
        except Exception as e:
            logger.error("PDF提取失败", error=str(e), size=len(data))
            raise ExtractionError(
                ErrorType.EXTRACTION_FAILED,
                f"Failed to extract text from PDF: {e}",
            ) from e

        content = TextPreprocessor.join_pages(pages)
        if not content:
            raise InputError(
                ErrorType.CONTENT_TOO_SHORT,
                "No text could be extracted from the PDF",
                {"pages_with_text": len(pages)},
            )

        logger.info(
            "PDF内容提取成功",
            pages_with_text=len(pages),
            content_length=len(content)
        )
        return content
