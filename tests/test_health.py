import unittest
from decimal import Decimal
from disease_sync.models.sync import SOURCE_TABLES
from disease_sync.services.exceptions import QueryExecutionError
from disease_sync.services.health import HealthChecker, Verifier
from fakes import FakeConnector

class TestHealthChecker(unittest.IsolatedAsyncioTestCase):
    async def test_empty_table_is_flagged_and_others_still_counted(self):
        counts = {table: 10 for table in SOURCE_TABLES}
        counts["drugitems"] = 0
        source = FakeConnector(counts=counts)
        target = FakeConnector(counts={"ai_disease_training_data": 7})

        report = await HealthChecker(source, target, "hos", "hos_ai").run()

        self.assertEqual([s.table for s in report.source_tables], list(SOURCE_TABLES))
        self.assertEqual(report.empty_tables(), ["drugitems"])
        self.assertEqual(report.counts()["opdscreen"], 10)
        self.assertEqual(report.counts()["hismember"], 10)
        self.assertEqual(report.destination.count, 7)

    async def test_failing_table_does_not_abort_siblings(self):
        counts = {table: 5 for table in SOURCE_TABLES}
        source = FakeConnector(counts=counts, failing_tables={"vn_stat": "Table 'hos.vn_stat' doesn't exist"})
        target = FakeConnector(failing_tables={"ai_disease_training_data": "no such table"})

        report = await HealthChecker(source, target, "hos", "hos_ai").run()

        self.assertEqual(report.failed_tables(), ["vn_stat"])
        self.assertEqual(report.empty_tables(), [])
        ok_tables = [s.table for s in report.source_tables if s.ok]
        self.assertEqual(len(ok_tables), len(SOURCE_TABLES) - 1)
        self.assertFalse(report.destination.ok)
        self.assertIn("no such table", report.destination.error)

    async def test_health_check_is_read_only(self):
        source = FakeConnector(counts={table: 1 for table in SOURCE_TABLES})
        target = FakeConnector()
        await HealthChecker(source, target, "hos", "hos_ai").run()
        self.assertEqual(source.executed, [])
        self.assertEqual(target.executed, [])

class TestVerifier(unittest.IsolatedAsyncioTestCase):
    async def test_empty_destination_reports_zero_counts_and_na_average(self):
        target = FakeConnector(scalars={"AVG(age)": None, "COUNT": 0})

        results = await Verifier(target, "hos_ai").run()

        self.assertEqual([r.label for r in results], [
            "Total Records",
            "Unique Patients (HN)",
            "Unique Diseases (ICD10)",
            "Records with Unknown Symptoms",
            "Records with Unknown Disease",
            "Average Age",
        ])
        for result in results[:5]:
            self.assertEqual(result.value, 0)
            self.assertEqual(result.display, "0")
        self.assertIsNone(results[5].value)
        self.assertEqual(results[5].display, "N/A")
        self.assertTrue(all(r.ok for r in results))

    async def test_metric_failure_is_isolated(self):
        target = FakeConnector(scalars={
            "COUNT(DISTINCT hn)": QueryExecutionError("Unknown column 'hn'"),
            "AVG(age)": Decimal("34.5"),
            "COUNT": 12,
        })

        results = await Verifier(target, "hos_ai").run()

        by_label = {r.label: r for r in results}
        self.assertFalse(by_label["Unique Patients (HN)"].ok)
        self.assertEqual(by_label["Total Records"].value, 12)
        self.assertEqual(by_label["Average Age"].value, 34.5)
        self.assertEqual(len(results), 6)

    async def test_unknown_sentinel_excluded_from_disease_count(self):
        target = FakeConnector()
        await Verifier(target, "hos_ai").run()
        statements = target.statements()
        self.assertIn(
            "SELECT COUNT(DISTINCT icd10_code) FROM `hos_ai`.`ai_disease_training_data` WHERE icd10_code != 'Unknown'",
            statements,
        )
        self.assertIn(
            "SELECT ROUND(AVG(age), 1) FROM `hos_ai`.`ai_disease_training_data` WHERE age > 0",
            statements,
        )

if __name__ == '__main__':
    unittest.main()
