"""
处理异常到HTTP错误的映射
"""
from fastapi import HTTPException, status

from app.utils.processing_exception import (
    ErrorType,
    ExtractionError,
    InputError,
    ProcessingException,
)


def to_http_exception(error: ProcessingException) -> HTTPException:
    """按异常类别转换为HTTPException，detail中保留错误类型和用户操作建议"""
    if isinstance(error, InputError):
        if error.error_type == ErrorType.NOT_FOUND:
            code = status.HTTP_404_NOT_FOUND
        else:
            code = status.HTTP_400_BAD_REQUEST
    elif isinstance(error, ExtractionError):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=error.to_dict())
