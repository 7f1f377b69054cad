from typing import Optional

SQL_EXCERPT_LENGTH = 500

class SyncError(Exception):
    """同步过程中的错误基类"""

class DatabaseConnectionError(SyncError):
    """连接池创建或连接验证失败，终止本次运行"""

    def __init__(self, message: str, database: Optional[str] = None):
        super().__init__(message)
        self.database = database

class QueryExecutionError(SyncError):
    """SQL语句执行失败，携带语句片段便于排查"""

    def __init__(self, message: str, sql: Optional[str] = None):
        super().__init__(message)
        self.sql = sql[:SQL_EXCERPT_LENGTH] if sql else sql

    def __str__(self) -> str:
        message = super().__str__()
        if self.sql:
            return f"{message} (SQL: {' '.join(self.sql.split())})"
        return message
