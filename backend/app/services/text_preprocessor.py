"""
文本预处理服务
对PDF提取出的原始文本做格式统一和字符清洗
"""
import re
from typing import Iterable

import structlog

logger = structlog.get_logger()


class TextPreprocessor:
    """文本预处理器"""

    # 连续空白（含换行、制表符）
    WHITESPACE_PATTERN = re.compile(r"\s+")

    # 允许保留的字符：单词字符、空白和基础标点
    DISALLOWED_CHAR_PATTERN = re.compile(r"[^\w\s.,!?;:()\-\"']")

    # 页面文本之间的分隔符
    PAGE_SEPARATOR = " "

    @staticmethod
    def normalize(content: str) -> str:
        """
        规范化文本

        1. 所有连续空白合并为单个空格
        2. 去除基础标点以外的符号和不可见字符
        3. 去除首尾空白

        Args:
            content: 原始文本

        Returns:
            规范化后的文本
        """
        if not content:
            return ""

        content = TextPreprocessor.WHITESPACE_PATTERN.sub(" ", content)
        content = TextPreprocessor.DISALLOWED_CHAR_PATTERN.sub("", content)
        return content.strip()

    @staticmethod
    def join_pages(pages: Iterable[str]) -> str:
        """
        拼接逐页文本并规范化

        Args:
            pages: 按页顺序的文本块

        Returns:
            规范化后的全文
        """
        pages = [page for page in pages if page]
        content = TextPreprocessor.PAGE_SEPARATOR.join(pages)
        normalized = TextPreprocessor.normalize(content)

        logger.debug(
            "页面文本拼接完成",
            pages=len(pages),
            original_length=len(content),
            normalized_length=len(normalized),
        )
        return normalized
