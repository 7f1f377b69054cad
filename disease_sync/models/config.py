from typing import Optional
from dataclasses import dataclass, field
from loguru import logger

@dataclass(frozen=True)
class DatabaseConfig:
    type: str
    host: str
    port: int
    username: str
    password: str
    database: str
    charset: str = "utf8mb4"
    sql_mode: Optional[str] = None

    def describe(self) -> str:
        """不含密码的连接描述"""
        return f"{self.username}@{self.host}:{self.port}/{self.database}"

@dataclass(frozen=True)
class PoolSettings:
    max_connections: int = 10
    acquire_timeout: int = 30
    idle_timeout: int = 300
    max_lifetime: int = 1800

@dataclass(frozen=True)
class SyncConfig:
    source: DatabaseConfig
    target: DatabaseConfig
    limit: int = 50000
    batch_size: int = 500
    max_workers: int = 2
    pool: PoolSettings = field(default_factory=PoolSettings)

    def __post_init__(self):
        if not self.source.database or not self.source.database.strip():
            raise ValueError("Source schema name must not be empty")
        if not self.target.database or not self.target.database.strip():
            raise ValueError("Destination schema name must not be empty")
        if self.limit <= 0:
            raise ValueError(f"Row limit must be positive, got {self.limit}")
        if self.batch_size <= 0:
            raise ValueError(f"Batch size must be positive, got {self.batch_size}")

    @property
    def source_schema(self) -> str:
        return self.source.database

    @property
    def target_schema(self) -> str:
        return self.target.database

    def log_summary(self, label: Optional[str] = None) -> None:
        """打印数据库配置（不含密码）"""
        logger.info(label or "=== DATABASE CONFIGURATION ===")
        for name, db in (("Source", self.source), ("Destination", self.target)):
            logger.info(f"{name} Database:")
            logger.info(f"   Host: {db.host}")
            logger.info(f"   Port: {db.port}")
            logger.info(f"   User: {db.username}")
            logger.info(f"   Database: {db.database}")
        logger.info(f"Row limit: {self.limit}, batch size: {self.batch_size}, workers: {self.max_workers}")
