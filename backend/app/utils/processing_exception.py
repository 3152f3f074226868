"""
处理异常类
定义明确的错误类型和错误信息结构
"""
from typing import Dict, List, Optional
from enum import Enum


class ErrorType(str, Enum):
    """错误类型枚举"""
    INVALID_URL = "invalid_url"
    INVALID_FILE = "invalid_file"
    FILE_TOO_LARGE = "file_too_large"
    CONTENT_TOO_SHORT = "content_too_short"
    TRANSPORT_ERROR = "transport_error"
    EXTRACTION_FAILED = "extraction_failed"
    PERSISTENCE_FAILED = "persistence_failed"
    LEARNING_CYCLE_FAILED = "learning_cycle_failed"
    NOT_FOUND = "not_found"


class ProcessingException(Exception):
    """处理异常基类"""

    def __init__(
        self,
        error_type: ErrorType,
        error_message: str,
        error_details: Optional[Dict] = None,
    ):
        """
        初始化处理异常

        Args:
            error_type: 错误类型
            error_message: 错误消息
            error_details: 错误详情（如HTTP状态码、URL等）
        """
        super().__init__(error_message)
        self.error_type = error_type
        self.error_message = error_message
        self.error_details = error_details or {}

    def to_dict(self) -> Dict:
        """转换为字典格式"""
        return {
            "error_type": self.error_type.value,
            "error_message": self.error_message,
            "error_details": self.error_details,
            "user_actions": UserActionMapper.get_actions_for_error(self.error_type, self.error_details),
        }


class InputError(ProcessingException):
    """输入错误（无效URL、非PDF文件、提取文本为空），立即返回，不重试"""


class ExtractionError(ProcessingException):
    """提取错误（网络传输失败、整个文档无法读取）"""


class PersistenceError(ProcessingException):
    """存储错误"""

    def __init__(self, error_message: str, error_details: Optional[Dict] = None):
        super().__init__(ErrorType.PERSISTENCE_FAILED, error_message, error_details)


class LearningCycleError(ProcessingException):
    """学习周期错误（仅在控制器内部记录，不暴露给用户）"""

    def __init__(self, error_message: str, error_details: Optional[Dict] = None):
        super().__init__(ErrorType.LEARNING_CYCLE_FAILED, error_message, error_details)


class UserActionMapper:
    """用户操作建议映射器"""

    @staticmethod
    def get_actions_for_error(error_type: ErrorType, error_details: Dict) -> List[Dict]:
        """
        根据错误类型获取用户操作建议

        Args:
            error_type: 错误类型
            error_details: 错误详情

        Returns:
            用户操作建议列表
        """
        actions_map = {
            ErrorType.INVALID_URL: [
                {
                    "action": "check_url",
                    "label": "Check URL",
                    "description": "The URL must use http or https and point to a .pdf file"
                }
            ],
            ErrorType.INVALID_FILE: [
                {
                    "action": "re_upload",
                    "label": "Upload again",
                    "description": "Please select a valid PDF file"
                }
            ],
            ErrorType.FILE_TOO_LARGE: [
                {
                    "action": "split_document",
                    "label": "Split document",
                    "description": f"The file exceeds the size limit ({error_details.get('max_size', 'unknown')} bytes)"
                }
            ],
            ErrorType.CONTENT_TOO_SHORT: [
                {
                    "action": "check_content",
                    "label": "Check content",
                    "description": "No readable text was found; the PDF may be scanned images"
                }
            ],
            ErrorType.TRANSPORT_ERROR: [
                {
                    "action": "retry",
                    "label": "Retry",
                    "description": "The remote server could not be reached, try again later"
                }
            ],
            ErrorType.EXTRACTION_FAILED: [
                {
                    "action": "check_file",
                    "label": "Check file",
                    "description": "The PDF may be damaged or encrypted"
                }
            ],
        }

        return actions_map.get(error_type, [
            {
                "action": "retry",
                "label": "Retry",
                "description": "Try the request again"
            }
        ])
