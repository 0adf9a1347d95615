"""
应用配置模块 (Application Configuration Module)

使用 Pydantic Settings 管理 statuswatch 的配置项，支持从 .env 文件和环境变量读取。
所有环境变量使用 STATUSWATCH_ 前缀，例如 STATUSWATCH_POLL_INTERVAL=60。

Uses Pydantic Settings to manage statuswatch configuration, read from a .env file
and environment variables. Every variable carries the STATUSWATCH_ prefix.
"""
import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# 兼容性常量，数值必须与原状态页服务保持一致 (Compatibility constants)
POLL_INTERVAL_SECONDS = 300.0
PRIMARY_TIMEOUT_SECONDS = 10.0
PORT_TIMEOUT_SECONDS = 5.0
REACHABILITY_PORT_TIMEOUT_SECONDS = 5.0
HISTORY_CAPACITY = 100
DEFAULT_GAME_PORT = 25565


class Settings(BaseSettings):
    """
    应用全局配置类 (Application Global Configuration Class)

    字段名自动映射带前缀的同名环境变量（不区分大小写）。
    Field names map to prefixed environment variables (case insensitive).
    """

    # 服务注册表 (Service registry)
    services_file: str = "services.json"  # 服务定义文件，支持 .json / .yaml (Service definitions file)

    # HTTP 服务 (HTTP server)
    host: str = "0.0.0.0"
    port: int = 3000

    # 轮询 (Polling)
    poll_interval: float = POLL_INTERVAL_SECONDS  # 轮询间隔（秒） (Poll interval in seconds)
    poll_on_startup: bool = True  # 启动时立即执行一次检查 (Run one cycle right after startup)
    poller_enabled: bool = True  # 是否启动后台轮询 (Start the background poller)

    # 超时 (Timeouts, seconds)
    http_timeout: float = PRIMARY_TIMEOUT_SECONDS
    port_timeout: float = PRIMARY_TIMEOUT_SECONDS
    game_timeout: float = PRIMARY_TIMEOUT_SECONDS
    reachability_port_timeout: float = REACHABILITY_PORT_TIMEOUT_SECONDS

    # 历史缓冲区容量 (History buffer capacity, in snapshots)
    history_capacity: int = Field(HISTORY_CAPACITY, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="STATUSWATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# 全局配置实例 (Global Configuration Instance)
settings = Settings()

if settings.history_capacity != HISTORY_CAPACITY:
    logger.warning(
        "History capacity overridden to %d (default %d); uptime statistics cover a different window",
        settings.history_capacity,
        HISTORY_CAPACITY,
    )
