"""
原生驱动层

- jdbc: 基于 JPype1 + JayDeBeApi 的 JDBC 驱动加载与缓存
- sqlite: 基于 SQLAlchemy 的 SQLite 连接
"""
