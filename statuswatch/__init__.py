"""statuswatch - 服务状态监控引擎 (service status monitoring engine)."""

__version__ = "0.1.0"
