from loguru import logger
from disease_sync.connectors.base import BaseConnector
from disease_sync.models.sync import TRAINING_TABLE

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS `{schema}`.`{table}` (
    `id` BIGINT AUTO_INCREMENT PRIMARY KEY,
    `visit_id` VARCHAR(50) UNIQUE NOT NULL,
    `hn` VARCHAR(9),
    `vn` VARCHAR(13),
    `symptoms` LONGTEXT,
    `icd10_code` VARCHAR(9),
    `disease_name` VARCHAR(255),
    `medicines` LONGTEXT,
    `age` INT,
    `sex` CHAR(1),
    `visit_date` DATE,
    `created_at` TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    `updated_at` TIMESTAMP DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
    INDEX `idx_hn` (`hn`),
    INDEX `idx_vn` (`vn`),
    INDEX `idx_icd10` (`icd10_code`),
    INDEX `idx_visit_date` (`visit_date`),
    INDEX `idx_age` (`age`)
) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci
"""

class SchemaManager:
    """目标库训练表的建表、清空和计数"""

    def __init__(self, connector: BaseConnector, schema: str, table: str = TRAINING_TABLE):
        self.connector = connector
        self.schema = schema
        self.table = table

    @property
    def qualified_name(self) -> str:
        return f"{self.schema}.{self.table}"

    async def create_training_table(self) -> None:
        """建表（已存在则跳过）"""
        logger.info(f"Creating/Verifying table: {self.qualified_name}")
        try:
            await self.connector.execute(CREATE_TABLE_SQL.format(schema=self.schema, table=self.table))
            logger.success("Table created/verified successfully")
        except Exception as e:
            logger.error(f"Failed to create table {self.qualified_name}: {str(e)}")
            raise

    async def clear_table(self) -> None:
        """清空目标表"""
        logger.info(f"Truncating target table: {self.qualified_name}")
        try:
            await self.connector.execute(f"TRUNCATE TABLE `{self.schema}`.`{self.table}`")
            logger.success(f"Successfully truncated table: {self.qualified_name}")
        except Exception as e:
            logger.error(f"Failed to truncate table {self.qualified_name}: {str(e)}")
            raise

    async def get_table_count(self) -> int:
        count = await self.connector.get_row_count(self.schema, self.table)
        logger.debug(f"Current table count: {count}")
        return count
