from typing import Callable, List, Optional, Union
from loguru import logger
from disease_sync.models.config import SyncConfig
from disease_sync.models.sync import (
    SyncMode, SyncStats, Full, Incremental, HealthCheck, Preview, Verify,
    HealthReport, MetricResult, TrainingRecord,
)
from disease_sync.connectors.factory import ConnectorFactory
from disease_sync.connectors.base import BaseConnector
from disease_sync.services.schema import SchemaManager
from disease_sync.services.transform import TransformationEngine
from disease_sync.services.health import HealthChecker, Verifier
from disease_sync.services.monitor import PerformanceMonitor

RunResult = Union[SyncStats, HealthReport, List[MetricResult], List[TrainingRecord]]

class SyncService:
    def __init__(self, config: SyncConfig,
                 monitor: Optional[PerformanceMonitor] = None,
                 connector_factory: Callable[..., BaseConnector] = ConnectorFactory.get_connector,
                 engine_factory: Callable[..., TransformationEngine] = TransformationEngine):
        self.config = config
        self.monitor = monitor or PerformanceMonitor()
        self.connector_factory = connector_factory
        self.engine_factory = engine_factory
        self.source_connector: BaseConnector = None
        self.target_connector: BaseConnector = None

    async def initialize(self) -> None:
        """初始化源和目标数据库连接池，并各执行一次 SELECT 1"""
        try:
            self.source_connector = self.connector_factory(
                self.config.source.type, self.config.source, self.config.pool, "SOURCE"
            )
            await self.source_connector.connect()
            self.monitor.checkpoint("Source pool created")

            self.target_connector = self.connector_factory(
                self.config.target.type, self.config.target, self.config.pool, "DESTINATION"
            )
            await self.target_connector.connect()
            self.monitor.checkpoint("Destination pool created")

            self.monitor.checkpoint("Connections verified")
        except Exception as e:
            logger.error(f"Failed to initialize database connections: {str(e)}")
            raise

    async def cleanup(self) -> None:
        """清理资源"""
        if self.source_connector:
            await self.source_connector.disconnect()
        if self.target_connector:
            await self.target_connector.disconnect()

    def _engine(self) -> TransformationEngine:
        return self.engine_factory(
            self.source_connector, self.target_connector,
            self.config.source_schema, self.config.target_schema,
        )

    def _schema_manager(self) -> SchemaManager:
        return SchemaManager(self.target_connector, self.config.target_schema)

    async def ensure_schema(self) -> None:
        await self._schema_manager().create_training_table()
        self.monitor.checkpoint("Training table created")

    async def full_sync(self) -> SyncStats:
        await self.ensure_schema()
        await self._schema_manager().clear_table()
        self.monitor.checkpoint("Table cleared")
        return await self._engine().run_full(self.config.limit)

    async def incremental_sync(self, hours: int) -> SyncStats:
        await self.ensure_schema()
        return await self._engine().run_incremental(hours)

    async def health_check(self) -> HealthReport:
        checker = HealthChecker(
            self.source_connector, self.target_connector,
            self.config.source_schema, self.config.target_schema,
        )
        return await checker.run()

    async def preview(self) -> List[TrainingRecord]:
        return await self._engine().preview()

    async def verify(self) -> List[MetricResult]:
        return await Verifier(self.target_connector, self.config.target_schema).run()

    async def dispatch(self, mode: SyncMode) -> RunResult:
        if isinstance(mode, Full):
            return await self.full_sync()
        if isinstance(mode, Incremental):
            return await self.incremental_sync(mode.hours)
        if isinstance(mode, HealthCheck):
            return await self.health_check()
        if isinstance(mode, Preview):
            return await self.preview()
        if isinstance(mode, Verify):
            return await self.verify()
        raise TypeError(f"Unsupported sync mode: {mode!r}")

    async def run(self, mode: SyncMode) -> RunResult:
        """按模式执行一次完整运行：建连接 -> (建表/清表) -> 执行 -> 统计"""
        try:
            logger.info(f"=== {mode.label} MODE ===")
            await self.initialize()

            result = await self.dispatch(mode)
            self.monitor.checkpoint("Mode execution completed")

            if isinstance(result, SyncStats):
                logger.success(f"{mode.label} COMPLETED SUCCESSFULLY")
                logger.info(f"Total Processed: {result.processed}")
                logger.info(f"Total Inserted: {result.inserted}")
                logger.info(f"Total Errors: {result.errors}")
                logger.info(f"Execution Time: {result.execution_time:.2f}s")
            return result

        except Exception as e:
            logger.error(f"{mode.label} FAILED: {str(e)}")
            raise
        finally:
            await self.cleanup()
