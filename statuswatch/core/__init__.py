"""
核心模块包 (Core Module Package)

statuswatch 的基础设施组件：配置管理与业务异常。

Infrastructure components for statuswatch: settings management and business exceptions.
"""
