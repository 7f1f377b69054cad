from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional
from disease_sync.models.config import DatabaseConfig, PoolSettings

class BaseConnector(ABC):
    def __init__(self, config: DatabaseConfig, pool: Optional[PoolSettings] = None, name: Optional[str] = None):
        self.config = config
        self.pool = pool or PoolSettings()
        self.name = name or config.database

    @abstractmethod
    async def connect(self) -> None:
        """建立连接池并验证连接"""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """关闭连接池"""
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """执行 SELECT 1 验证连接"""
        pass

    @abstractmethod
    async def execute(self, sql: str, params: Dict[str, Any] = None) -> int:
        """
        执行SQL语句

        Args:
            sql: 要执行的SQL语句
            params: 绑定参数

        Returns:
            受影响的行数
        """
        pass

    @abstractmethod
    async def fetch_all(self, sql: str, params: Dict[str, Any] = None) -> List[Dict[str, Any]]:
        """执行查询，返回字典列表"""
        pass

    @abstractmethod
    async def fetch_scalar(self, sql: str, params: Dict[str, Any] = None) -> Any:
        """执行查询，返回第一行第一列"""
        pass

    async def get_row_count(self, schema: str, table_name: str) -> int:
        """
        获取表的总行数

        Args:
            schema: 库名
            table_name: 表名

        Returns:
            表中的记录数
        """
        return int(await self.fetch_scalar(f"SELECT COUNT(*) AS cnt FROM `{schema}`.`{table_name}`"))
