from decimal import Decimal
from typing import Any, List, Sequence, Tuple
from loguru import logger
from disease_sync.connectors.base import BaseConnector
from disease_sync.models.sync import (
    HealthReport, MetricResult, TableStatus, SOURCE_TABLES, TRAINING_TABLE, UNKNOWN,
)

class HealthChecker:
    """源库各表与目标表的行数检查，只读"""

    def __init__(self, source: BaseConnector, target: BaseConnector,
                 source_schema: str, target_schema: str,
                 tables: Sequence[str] = SOURCE_TABLES):
        self.source = source
        self.target = target
        self.source_schema = source_schema
        self.target_schema = target_schema
        self.tables = tuple(tables)

    async def _check_table(self, connector: BaseConnector, schema: str, table: str) -> TableStatus:
        try:
            count = await connector.get_row_count(schema, table)
        except Exception as e:
            logger.error(f" {schema}.{table}: {str(e)}")
            return TableStatus(table=table, error=str(e))

        if count > 0:
            logger.info(f" {schema}.{table}: {count} records")
        else:
            logger.warning(f" {schema}.{table}: EMPTY")
        return TableStatus(table=table, count=count)

    async def run(self) -> HealthReport:
        logger.info("=== COMPREHENSIVE HEALTH CHECK ===")

        logger.info("Source Database Table Status:")
        source_tables = []
        for table in self.tables:
            source_tables.append(await self._check_table(self.source, self.source_schema, table))

        logger.info("Destination Database Status:")
        destination = await self._check_table(self.target, self.target_schema, TRAINING_TABLE)

        report = HealthReport(source_tables=source_tables, destination=destination)
        if report.empty_tables():
            logger.warning(f"Empty source tables: {', '.join(report.empty_tables())}")
        if report.failed_tables():
            logger.error(f"Failed source table checks: {', '.join(report.failed_tables())}")
        logger.success("Health check completed")
        return report

def verification_checks(schema: str, table: str = TRAINING_TABLE) -> List[Tuple[str, str]]:
    qualified = f"`{schema}`.`{table}`"
    return [
        ("Total Records",
         f"SELECT COUNT(*) FROM {qualified}"),
        ("Unique Patients (HN)",
         f"SELECT COUNT(DISTINCT hn) FROM {qualified} WHERE hn IS NOT NULL"),
        ("Unique Diseases (ICD10)",
         f"SELECT COUNT(DISTINCT icd10_code) FROM {qualified} WHERE icd10_code != '{UNKNOWN}'"),
        ("Records with Unknown Symptoms",
         f"SELECT COUNT(*) FROM {qualified} WHERE symptoms = '{UNKNOWN}'"),
        ("Records with Unknown Disease",
         f"SELECT COUNT(*) FROM {qualified} WHERE disease_name = '{UNKNOWN}'"),
        ("Average Age",
         f"SELECT ROUND(AVG(age), 1) FROM {qualified} WHERE age > 0"),
    ]

def _normalize(value: Any) -> Any:
    # ROUND(AVG()) 返回 Decimal
    if isinstance(value, Decimal):
        return float(value)
    return value

class Verifier:
    """目标训练表的完整性指标，每项独立计算"""

    def __init__(self, target: BaseConnector, target_schema: str):
        self.target = target
        self.target_schema = target_schema

    async def run(self) -> List[MetricResult]:
        logger.info("=== DATA INTEGRITY VERIFICATION ===")
        results = []
        for label, sql in verification_checks(self.target_schema):
            try:
                value = _normalize(await self.target.fetch_scalar(sql))
            except Exception as e:
                logger.error(f" {label}: {str(e)}")
                results.append(MetricResult(label=label, error=str(e)))
                continue

            result = MetricResult(label=label, value=value)
            logger.info(f" {label}: {result.display}")
            results.append(result)
        return results
