"""
文件处理工具函数
"""
from pathlib import Path
from typing import List, Optional, Tuple
from fastapi import UploadFile
import structlog

from app.utils.processing_exception import ErrorType, InputError

logger = structlog.get_logger()

PDF_CONTENT_TYPES = ("application/pdf", "application/x-pdf")
PDF_MAGIC = b"%PDF"


def get_file_extension(filename: str) -> str:
    """获取文件扩展名"""
    return Path(filename).suffix.lower().lstrip('.')


def is_allowed_file(filename: str, allowed_extensions: list) -> bool:
    """检查文件类型是否允许"""
    ext = get_file_extension(filename)
    return ext in allowed_extensions


def validate_file_size(file_size: int, max_size: int) -> bool:
    """验证文件大小"""
    return file_size <= max_size


def title_from_filename(filename: str) -> str:
    """由文件名生成文档标题（去掉.pdf后缀）"""
    name = Path(filename or "").name
    if name.lower().endswith(".pdf"):
        name = name[:-4]
    return name or "Untitled Document"


def is_pdf_upload(filename: str, content_type: Optional[str], content: bytes, allowed_extensions: List[str]) -> bool:
    """检查上传内容是否为PDF（扩展名、Content-Type、文件头任一不符即拒绝）"""
    if not filename or not is_allowed_file(filename, allowed_extensions):
        return False
    if content_type and content_type not in PDF_CONTENT_TYPES and content_type != "application/octet-stream":
        return False
    return content.startswith(PDF_MAGIC)


async def read_pdf_upload(
    file: UploadFile,
    max_size: int,
    allowed_extensions: List[str]
) -> Tuple[bytes, int]:
    """
    读取并校验上传的PDF

    Returns:
        tuple: (文件内容, 文件大小)
    """
    content = await file.read()
    file_size = len(content)

    if not is_pdf_upload(file.filename, file.content_type, content, allowed_extensions):
        raise InputError(
            ErrorType.INVALID_FILE,
            f"Please select a valid PDF file: {file.filename}",
            {"filename": file.filename, "content_type": file.content_type},
        )

    if not validate_file_size(file_size, max_size):
        raise InputError(
            ErrorType.FILE_TOO_LARGE,
            f"File size exceeds limit: {file_size} bytes > {max_size} bytes",
            {"file_size": file_size, "max_size": max_size},
        )

    logger.info("上传文件校验通过", filename=file.filename, size=file_size)
    return content, file_size
