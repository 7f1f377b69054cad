import time
from typing import List
from loguru import logger
from disease_sync.connectors.base import BaseConnector
from disease_sync.models.sync import SyncStats, TrainingRecord, TRAINING_TABLE, SOURCE_TABLES
from disease_sync.services.schema import SchemaManager

PREVIEW_LIMIT = 10

TRAINING_COLUMNS = (
    "visit_id", "hn", "vn", "symptoms", "icd10_code", "disease_name",
    "medicines", "age", "sex", "visit_date",
)

# 每个就诊一行：诊断码非空且主诊断去空格后非空才入选
SELECT_TEMPLATE = """
SELECT
    CONCAT(o.hn, '-', o.vn) AS visit_id,
    o.hn,
    o.vn,
    COALESCE(o.cc, 'Unknown') AS symptoms,
    COALESCE(i.code, 'Unknown') AS icd10_code,
    COALESCE(i.name, 'Unknown') AS disease_name,
    COALESCE(GROUP_CONCAT(DISTINCT CONCAT(d.name, ' ', COALESCE(d.strength, '')) SEPARATOR '|'), 'Unknown') AS medicines,
    YEAR(CURDATE()) - YEAR(COALESCE(o.vstdate, CURDATE())) AS age,
    COALESCE(h.sex, 'U') AS sex,
    o.vstdate AS visit_date
FROM `{src}`.opdscreen o
LEFT JOIN `{src}`.vn_stat v ON v.vn = o.vn
LEFT JOIN `{src}`.icd101 i ON i.code = v.pdx
LEFT JOIN `{src}`.opitemrece op ON op.vn = o.vn
LEFT JOIN `{src}`.drugitems d ON d.icode = op.icode
LEFT JOIN `{src}`.hismember h ON h.hn = o.hn
WHERE i.code IS NOT NULL
  AND TRIM(COALESCE(v.pdx, '')) != ''{window}
GROUP BY o.hn, o.vn, i.code, o.vstdate{tail}
"""

INCREMENTAL_WINDOW = "\n  AND o.vstdate >= DATE_SUB(NOW(), INTERVAL :hours HOUR)"

LATEST_FIRST = "\nORDER BY o.vstdate DESC\nLIMIT :limit"

# hn, vn, sex, visit_date 冲突时保持不变
UPSERT_CLAUSE = """
ON DUPLICATE KEY UPDATE
    symptoms = VALUES(symptoms),
    disease_name = VALUES(disease_name),
    medicines = VALUES(medicines),
    age = VALUES(age)
"""

def build_select(source_schema: str, incremental: bool = False, latest_first: bool = False) -> str:
    return SELECT_TEMPLATE.format(
        src=source_schema,
        window=INCREMENTAL_WINDOW if incremental else "",
        tail=LATEST_FIRST if latest_first else "",
    )

def build_insert(source_schema: str, target_schema: str, table: str = TRAINING_TABLE,
                 incremental: bool = False) -> str:
    """INSERT INTO ... SELECT；全量按日期倒序限量插入，增量按时间窗 upsert"""
    columns = ", ".join(TRAINING_COLUMNS)
    select = build_select(source_schema, incremental=incremental, latest_first=not incremental)
    sql = f"INSERT INTO `{target_schema}`.`{table}`\n({columns}){select}"
    if incremental:
        sql = sql.rstrip() + UPSERT_CLAUSE
    return sql

class TransformationEngine:
    """把源库多张规范化表汇总成训练表的一行一就诊"""

    def __init__(self, source: BaseConnector, target: BaseConnector,
                 source_schema: str, target_schema: str):
        self.source = source
        self.target = target
        self.source_schema = source_schema
        self.target_schema = target_schema
        self.schema_manager = SchemaManager(target, target_schema)

    async def get_source_record_count(self) -> int:
        count = await self.source.get_row_count(self.source_schema, "opdscreen")
        logger.debug(f"Source record count from {self.source_schema}.opdscreen: {count}")
        return count

    async def run_full(self, limit: int) -> SyncStats:
        """全量：仅插入，按就诊日期倒序取前 limit 条"""
        logger.info("Starting FULL SYNC with direct SQL INSERT...")
        start_time = time.time()
        insert_sql = build_insert(self.source_schema, self.target_schema)

        logger.info(f"Tables involved: {', '.join(SOURCE_TABLES)}")
        logger.info(f"Processing up to {limit} records")
        logger.debug(f"Generated SQL: {' '.join(insert_sql.split()[:40])}")

        source_count = await self.get_source_record_count()
        logger.info(f"Source opdscreen has {source_count} records")
        if source_count == 0:
            logger.warning("No source data found")
            return SyncStats.empty(time.time() - start_time)

        logger.info("Executing INSERT INTO...SELECT with JOINs...")
        try:
            rows_affected = await self.target.execute(insert_sql, {"limit": limit})
        except Exception as e:
            logger.error(f"Query execution failed: {str(e)}")
            raise

        logger.success("Query executed successfully")
        logger.info(f"Rows affected: {rows_affected}")
        final_count = await self.schema_manager.get_table_count()
        logger.info(f"Final record count in destination: {final_count}")

        return SyncStats(
            processed=rows_affected,
            inserted=rows_affected,
            errors=0,
            duration=time.time() - start_time,
        )

    async def run_incremental(self, hours: int) -> SyncStats:
        """
        增量：最近 hours 小时内的就诊，按 visit_id upsert

        受影响行数遵循 MySQL 的计数：新插入 1，有变更的更新 2，无变更 0
        """
        logger.info(f"Starting INCREMENTAL SYNC (last {hours} hours)...")
        start_time = time.time()
        upsert_sql = build_insert(self.source_schema, self.target_schema, incremental=True)

        logger.info(f"Syncing data from last {hours} hours")
        try:
            rows_affected = await self.target.execute(upsert_sql, {"hours": hours})
        except Exception as e:
            logger.error(f"Incremental sync failed: {str(e)}")
            raise

        logger.success("Incremental sync completed")
        logger.info(f"Rows affected: {rows_affected}")

        return SyncStats(
            processed=rows_affected,
            inserted=rows_affected,
            errors=0,
            duration=time.time() - start_time,
        )

    async def preview(self, limit: int = PREVIEW_LIMIT) -> List[TrainingRecord]:
        """预览源查询的前 limit 行，不写入目标库"""
        logger.info(f"Previewing first {limit} records from source query...")
        rows = await self.source.fetch_all(build_select(self.source_schema, latest_first=True), {"limit": limit})
        records = [TrainingRecord.from_row(row) for row in rows]

        logger.info(f"Preview: {len(records)} records found")
        for idx, record in enumerate(records, 1):
            logger.info(
                f" [{idx}] HN={record.hn}, VN={record.vn}, "
                f"Disease={record.disease_name}, Age={record.age if record.age is not None else 0}"
            )
        return records
