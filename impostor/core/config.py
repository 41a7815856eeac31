"""
Application configuration settings
应用配置设置 - 房间存储、游戏默认值与日志
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings for the impostor word game"""

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Server configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    WORKERS: int = 1

    # Room store configuration
    # auto: Redis when REDIS_URL is set, in-memory otherwise (not allowed in production)
    STORE_BACKEND: str = "auto"
    REDIS_URL: Optional[str] = None
    REDIS_MAX_CONNECTIONS: int = 10
    REDIS_SOCKET_TIMEOUT: int = 5
    REDIS_SOCKET_CONNECT_TIMEOUT: int = 5

    # Room lifecycle
    ROOM_TTL_SECONDS: int = 60 * 60 * 6  # 6 hours, refreshed on every write
    ROOM_CODE_LENGTH: int = 5
    ROOM_CODE_ATTEMPTS: int = 10

    # Game defaults
    MIN_PLAYERS: int = 3
    DEFAULT_NUM_IMPOSTORS: int = 1
    DEFAULT_CATEGORY: str = "General"
    DEFAULT_MAX_VOTINGS: int = 2
    DEFAULT_VOTING_DURATION_SECONDS: int = 60
    DEFAULT_AVATAR: str = "😀"

    # CORS
    CORS_ORIGINS: str = "*"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_TO_FILE: bool = False

    @property
    def cors_origins_list(self) -> list:
        """获取允许的跨域来源列表"""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
