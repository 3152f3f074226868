"""
应用配置管理
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """应用配置"""

    # 应用基础配置
    APP_NAME: str = "Nivaskar PDF摘要系统"
    DEBUG: bool = False

    # 数据库配置
    # 注意：默认使用本地SQLite文件，测试环境使用内存数据库
    DATABASE_URL: str = "sqlite+aiosqlite:///./summarizer.db"

    # 文件上传配置
    UPLOAD_MAX_SIZE: int = 15728640  # 15MB
    ALLOWED_EXTENSIONS: str = "pdf"  # 逗号分隔的字符串
    MIN_RECORD_TEXT_LENGTH: int = 100  # 提取文本超过该长度才记录到学习系统

    def get_allowed_extensions(self) -> List[str]:
        """获取允许的文件扩展名列表"""
        return [ext.strip() for ext in self.ALLOWED_EXTENSIONS.split(",")]

    # URL提取配置
    URL_FETCH_TIMEOUT: float = 30.0
    BATCH_URL_DELAY_SECONDS: float = 1.0  # 批量提取时每个URL之间的间隔，避免压垮远端服务器
    PDF_USER_AGENT: str = "Nivaskar PDF Extractor 1.0"

    # CORS配置
    CORS_ORIGINS: str = "http://localhost,http://localhost:3000,http://localhost:5173"  # 逗号分隔的字符串

    def get_cors_origins(self) -> List[str]:
        """获取CORS允许的来源列表"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    # 日志配置
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # 是否输出JSON格式日志（生产环境建议开启）

    # 自学习配置
    ENABLE_BACKGROUND_LEARNING: bool = True  # 是否启动后台学习周期
    LEARNING_INTERVAL_SECONDS: float = 1800  # 学习周期间隔：30分钟
    LEARNING_INITIAL_DELAY_SECONDS: float = 300  # 首次学习延迟：5分钟
    LEARNING_LOOKBACK: int = 20  # 每次学习周期读取的最近文档数
    LEARNING_MIN_DOCUMENTS: int = 5  # 少于该文档数时跳过学习周期
    LEARNING_ADJUSTMENT_FACTOR: float = 0.05  # 每个权重的最大扰动幅度
    LEARNING_QUALITY_INCREMENT: float = 0.01  # 每次学习周期平均质量的增量

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
