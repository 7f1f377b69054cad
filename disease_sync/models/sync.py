from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Union
from dataclasses import dataclass

TRAINING_TABLE = "ai_disease_training_data"

# 健康检查涉及的源表，顺序即报告顺序
SOURCE_TABLES = ("opdscreen", "vn_stat", "icd101", "opitemrece", "drugitems", "hismember")

UNKNOWN = "Unknown"
UNKNOWN_SEX = "U"
NOT_APPLICABLE = "N/A"

@dataclass(frozen=True)
class Full:
    label = "FULL SYNC"

@dataclass(frozen=True)
class Incremental:
    hours: int = 24

    @property
    def label(self) -> str:
        return f"INCREMENTAL SYNC (last {self.hours} hours)"

@dataclass(frozen=True)
class HealthCheck:
    label = "HEALTH CHECK"

@dataclass(frozen=True)
class Preview:
    label = "PREVIEW"

@dataclass(frozen=True)
class Verify:
    label = "VERIFY"

SyncMode = Union[Full, Incremental, HealthCheck, Preview, Verify]

@dataclass(frozen=True)
class SyncStats:
    processed: int
    inserted: int
    errors: int
    duration: float

    @classmethod
    def empty(cls, duration: float = 0.0) -> "SyncStats":
        return cls(processed=0, inserted=0, errors=0, duration=duration)

    @property
    def execution_time(self) -> float:
        return self.duration

    def as_dict(self) -> Dict[str, Any]:
        return {
            "processed": self.processed,
            "inserted": self.inserted,
            "errors": self.errors,
            "duration": self.duration,
        }

@dataclass(frozen=True)
class TrainingRecord:
    visit_id: str
    hn: Optional[str]
    vn: Optional[str]
    symptoms: str
    icd10_code: str
    disease_name: str
    medicines: str
    age: Optional[int]
    sex: str
    visit_date: Optional[date]

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "TrainingRecord":
        age = row.get("age")
        return cls(
            visit_id=row["visit_id"],
            hn=row.get("hn"),
            vn=row.get("vn"),
            symptoms=row.get("symptoms") or UNKNOWN,
            icd10_code=row.get("icd10_code") or UNKNOWN,
            disease_name=row.get("disease_name") or UNKNOWN,
            medicines=row.get("medicines") or UNKNOWN,
            age=int(age) if age is not None else None,
            sex=row.get("sex") or UNKNOWN_SEX,
            visit_date=row.get("visit_date"),
        )

    @property
    def medicine_list(self) -> List[str]:
        if self.medicines == UNKNOWN:
            return []
        return self.medicines.split("|")

@dataclass(frozen=True)
class TableStatus:
    table: str
    count: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_empty(self) -> bool:
        return self.ok and self.count == 0

@dataclass(frozen=True)
class HealthReport:
    source_tables: List[TableStatus]
    destination: TableStatus

    def empty_tables(self) -> List[str]:
        return [status.table for status in self.source_tables if status.is_empty]

    def failed_tables(self) -> List[str]:
        return [status.table for status in self.source_tables if not status.ok]

    def counts(self) -> Dict[str, Optional[int]]:
        return {status.table: status.count for status in self.source_tables}

@dataclass(frozen=True)
class MetricResult:
    label: str
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def display(self) -> str:
        if self.value is None:
            return NOT_APPLICABLE
        return str(self.value)
