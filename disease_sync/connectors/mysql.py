from typing import List, Dict, Any, Optional
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, URL
from sqlalchemy.exc import SQLAlchemyError
from disease_sync.connectors.base import BaseConnector
from disease_sync.models.config import DatabaseConfig, PoolSettings
from disease_sync.services.exceptions import DatabaseConnectionError, QueryExecutionError
from loguru import logger

class MySQLConnector(BaseConnector):
    def __init__(self, config: DatabaseConfig, pool: Optional[PoolSettings] = None, name: Optional[str] = None):
        super().__init__(config, pool, name)
        self._engine: Engine = None

    def _build_url(self) -> URL:
        # 不指定默认库，所有语句都带库名
        return URL.create(
            "mysql+pymysql",
            username=self.config.username,
            password=self.config.password,
            host=self.config.host,
            port=self.config.port,
            query={"charset": self.config.charset},
        )

    def _connect_args(self) -> Dict[str, Any]:
        # 关闭 FOUND_ROWS，受影响行数按实际变更计算（未变更的 upsert 为 0）
        args: Dict[str, Any] = {"client_flag": 0}
        if self.config.sql_mode is not None:
            args["sql_mode"] = self.config.sql_mode
        return args

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise DatabaseConnectionError(f"Connection pool '{self.name}' is not initialized", self.config.database)
        return self._engine

    async def connect(self) -> None:
        url = self._build_url()
        logger.debug(f"Creating connection pool '{self.name}' with max_connections={self.pool.max_connections}")
        try:
            self._engine = create_engine(
                url,
                pool_size=self.pool.max_connections,
                max_overflow=0,
                pool_timeout=self.pool.acquire_timeout,
                pool_recycle=self.pool.max_lifetime,
                pool_pre_ping=True,
                connect_args=self._connect_args(),
            )
            logger.info(f"Connection pool '{self.name}' created successfully")
            logger.debug(f"Connection string: {url.render_as_string(hide_password=True)}")
        except SQLAlchemyError as e:
            logger.error(f"Failed to create connection pool '{self.name}': {str(e)}")
            raise DatabaseConnectionError(f"Failed to create connection pool '{self.name}': {e}", self.config.database) from e

        await self.ping()

    async def disconnect(self) -> None:
        if self._engine:
            self._engine.dispose()
            self._engine = None
            logger.info(f"Disconnected from MySQL ({self.name})")

    async def ping(self) -> bool:
        logger.debug(f"Verifying connection to database: {self.config.database}")
        try:
            with self.engine.connect() as conn:
                result = conn.execute(text("SELECT 1")).scalar()
            logger.info(f"Database connection verified for: {self.config.database}")
            return result == 1
        except SQLAlchemyError as e:
            logger.error(f"Connection verification failed for {self.config.database}: {str(e)}")
            raise DatabaseConnectionError(
                f"Connection verification failed for {self.config.database}: {e}", self.config.database
            ) from e

    async def execute(self, sql: str, params: Dict[str, Any] = None) -> int:
        try:
            with self.engine.connect() as conn:
                result = conn.execute(text(sql), params or {})
                conn.commit()
                logger.debug(f"Successfully executed SQL, rows affected: {result.rowcount}")
                return result.rowcount
        except SQLAlchemyError as e:
            logger.error(f"Failed to execute SQL: {str(e)}")
            raise QueryExecutionError(f"Failed to execute SQL: {e}", sql) from e

    async def fetch_all(self, sql: str, params: Dict[str, Any] = None) -> List[Dict[str, Any]]:
        try:
            with self.engine.connect() as conn:
                result = conn.execute(text(sql), params or {})
                return [dict(row) for row in result.mappings()]
        except SQLAlchemyError as e:
            logger.error(f"Failed to execute query: {str(e)}")
            raise QueryExecutionError(f"Failed to execute query: {e}", sql) from e

    async def fetch_scalar(self, sql: str, params: Dict[str, Any] = None) -> Any:
        try:
            with self.engine.connect() as conn:
                return conn.execute(text(sql), params or {}).scalar()
        except SQLAlchemyError as e:
            logger.error(f"Failed to execute query: {str(e)}")
            raise QueryExecutionError(f"Failed to execute query: {e}", sql) from e
