"""
核心模块

包含方言注册表、连接字符串构造、连接参数、调度器、连接句柄、结果游标、
设置管理、凭据加密以及异常定义。
"""
