"""
models.py
Lightweight domain records (students, halls, report rows).
"""

from __future__ import annotations
from dataclasses import dataclass

STATUS_PAID = "Paid"
STATUS_PENDING = "Pending"


def _amount(value) -> int:
    # NULL amounts count as zero
    return int(value or 0)


@dataclass(frozen=True)
class Student:
    id: int | None
    name: str
    cabin: str
    hall: str
    phone: str
    fee_paid: int
    fee_due: int
    status: str  # 'Paid' or 'Pending'
    join_date: str | None
    left_date: str | None
    monthly_fee: int
    last_fee_calculated_date: str | None
    created_at: str | None = None

    @property
    def is_active(self) -> bool:
        return not self.left_date

    @property
    def total_amount(self) -> int:
        return self.fee_paid + self.fee_due

    @classmethod
    def from_row(cls, row) -> "Student":
        return cls(
            id=row["id"],
            name=row["name"],
            cabin=row["cabin"],
            hall=row["hall"],
            phone=row["phone"],
            fee_paid=_amount(row["fee_paid"]),
            fee_due=_amount(row["fee_due"]),
            status=row["status"],
            join_date=row["join_date"],
            left_date=row["left_date"] or None,
            monthly_fee=_amount(row["monthly_fee"]),
            last_fee_calculated_date=row["last_fee_calculated_date"],
            created_at=row["created_at"],
        )


@dataclass(frozen=True)
class StudyHall:
    id: int | None
    name: str
    capacity: int
    location: str
    description: str | None
    created_at: str | None = None

    @classmethod
    def from_row(cls, row) -> "StudyHall":
        return cls(
            id=row["id"],
            name=row["name"],
            capacity=int(row["capacity"]),
            location=row["location"],
            description=row["description"],
            created_at=row["created_at"],
        )


@dataclass(frozen=True)
class AccrualResult:
    affected_count: int
    reference_date: str


@dataclass(frozen=True)
class UpcomingFee:
    student: Student
    next_fee_date: str


@dataclass(frozen=True)
class DashboardSummary:
    total_students: int = 0
    total_halls: int = 0
    active_students: int = 0
    left_students: int = 0
    monthly_fee_total: int = 0
    total_fees: int = 0
    pending_fees: int = 0
    total_fee_amount: int = 0
    students_with_pending_fees: int = 0


@dataclass(frozen=True)
class HallCollection:
    hall: str
    total_students: int
    fees_collected: int
    fees_pending: int
    total_fee_amount: int
    collection_rate: float  # percent, one decimal; 0 when nothing is billed

    @property
    def collection_rate_label(self) -> str:
        if self.collection_rate == 0:
            return "0%"
        return f"{self.collection_rate:g}%"


@dataclass(frozen=True)
class FeeBreakdown:
    total_students: int = 0
    total_fee_paid: int = 0
    total_fee_due: int = 0
    students_with_pending_fees: int = 0
    rows: tuple[dict, ...] = ()
