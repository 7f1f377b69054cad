import unittest
from disease_sync.models.config import SyncConfig
from disease_sync.models.sync import (
    Full, Incremental, HealthCheck, Preview, Verify, SyncStats, HealthReport, SOURCE_TABLES,
)
from disease_sync.services.exceptions import DatabaseConnectionError
from disease_sync.services.monitor import PerformanceMonitor
from disease_sync.services.sync import SyncService
from fakes import FakeConnector, make_db_config

class RecordingEngine:
    """替身转换引擎，记录调用"""

    calls = []

    def __init__(self, source, target, source_schema, target_schema):
        self.source_schema = source_schema
        self.target_schema = target_schema

    async def run_full(self, limit):
        RecordingEngine.calls.append(("run_full", limit))
        return SyncStats(processed=5, inserted=5, errors=0, duration=0.1)

    async def run_incremental(self, hours):
        RecordingEngine.calls.append(("run_incremental", hours))
        return SyncStats(processed=2, inserted=2, errors=0, duration=0.1)

    async def preview(self, limit=10):
        RecordingEngine.calls.append(("preview", limit))
        return []

class TestSyncService(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        RecordingEngine.calls = []
        self.config = SyncConfig(source=make_db_config("hos"), target=make_db_config("hos_ai"), limit=1000)
        self.source = FakeConnector(counts={table: 3 for table in SOURCE_TABLES})
        self.target = FakeConnector()
        self.monitor = PerformanceMonitor()

    def connector_factory(self, db_type, config, pool, name):
        return self.source if name == "SOURCE" else self.target

    def service(self):
        return SyncService(
            self.config,
            monitor=self.monitor,
            connector_factory=self.connector_factory,
            engine_factory=RecordingEngine,
        )

    async def test_full_sync_creates_truncates_then_loads(self):
        stats = await self.service().run(Full())

        self.assertEqual(stats.processed, 5)
        statements = self.target.statements()
        self.assertTrue(statements[0].startswith("CREATE TABLE IF NOT EXISTS `hos_ai`.`ai_disease_training_data`"))
        self.assertEqual(statements[1], "TRUNCATE TABLE `hos_ai`.`ai_disease_training_data`")
        self.assertEqual(RecordingEngine.calls, [("run_full", 1000)])

    async def test_incremental_sync_does_not_truncate(self):
        stats = await self.service().run(Incremental(72))

        self.assertEqual(stats.processed, 2)
        self.assertEqual(RecordingEngine.calls, [("run_incremental", 72)])
        self.assertFalse(any(s.startswith("TRUNCATE") for s in self.target.statements()))
        self.assertTrue(self.target.statements()[0].startswith("CREATE TABLE IF NOT EXISTS"))

    async def test_read_only_modes_never_write(self):
        for mode in (HealthCheck(), Preview(), Verify()):
            self.source.executed.clear()
            self.target.executed.clear()
            await self.service().run(mode)
            for statement in self.target.statements():
                self.assertTrue(statement.startswith("SELECT"), f"{mode}: {statement}")

    async def test_health_mode_returns_report(self):
        report = await self.service().run(HealthCheck())
        self.assertIsInstance(report, HealthReport)
        self.assertEqual(report.empty_tables(), [])

    async def test_verify_mode_returns_six_metrics(self):
        results = await self.service().run(Verify())
        self.assertEqual(len(results), 6)

    async def test_preview_mode_uses_engine(self):
        await self.service().run(Preview())
        self.assertEqual(RecordingEngine.calls, [("preview", 10)])

    async def test_checkpoints_follow_run_order(self):
        await self.service().run(Full())
        labels = [label for label, _ in self.monitor.checkpoints]
        self.assertEqual(labels, [
            "Source pool created",
            "Destination pool created",
            "Connections verified",
            "Training table created",
            "Table cleared",
            "Mode execution completed",
        ])

    async def test_connection_failure_aborts_run(self):
        self.target.fail_connect = True
        with self.assertRaises(DatabaseConnectionError):
            await self.service().run(Full())
        self.assertEqual(RecordingEngine.calls, [])
        self.assertEqual(self.target.executed, [])
        self.assertTrue(self.source.disconnected)

    async def test_connections_closed_after_run(self):
        await self.service().run(Verify())
        self.assertTrue(self.source.disconnected)
        self.assertTrue(self.target.disconnected)

    async def test_unknown_mode_rejected(self):
        with self.assertRaises(TypeError):
            await self.service().dispatch("full")

if __name__ == '__main__':
    unittest.main()
