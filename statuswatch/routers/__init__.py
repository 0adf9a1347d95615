"""
statuswatch 路由模块包 (Router Module Package)

- services.py: 服务注册表的增删查
- status.py: 即时检查、历史、统计
- public.py: 无需登记即可调用的临时检查
"""
