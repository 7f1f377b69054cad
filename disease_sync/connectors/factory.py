from typing import Dict, Optional, Type
from disease_sync.connectors.base import BaseConnector
from disease_sync.connectors.mysql import MySQLConnector
from disease_sync.models.config import DatabaseConfig, PoolSettings

class ConnectorFactory:
    _connectors: Dict[str, Type[BaseConnector]] = {
        "mysql": MySQLConnector,
    }

    @classmethod
    def get_connector(cls, db_type: str, config: DatabaseConfig,
                      pool: Optional[PoolSettings] = None, name: Optional[str] = None) -> BaseConnector:
        """
        获取数据库连接器实例

        Args:
            db_type: 数据库类型 (如 "mysql")
            config: 数据库配置
            pool: 连接池参数
            name: 连接池名称，仅用于日志

        Returns:
            BaseConnector: 数据库连接器实例

        Raises:
            ValueError: 如果数据库类型不支持
        """
        connector_class = cls._connectors.get(db_type.lower())
        if not connector_class:
            raise ValueError(f"Unsupported database type: {db_type}")

        return connector_class(config, pool, name)

    @classmethod
    def register_connector(cls, db_type: str, connector_class: Type[BaseConnector]) -> None:
        """
        注册新的数据库连接器

        Args:
            db_type: 数据库类型
            connector_class: 连接器类
        """
        cls._connectors[db_type.lower()] = connector_class
