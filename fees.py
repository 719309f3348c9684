"""
fees.py
Monthly fee accrual and the upcoming-fees view.
"""

from __future__ import annotations

import logging
from datetime import date

import utils
from db import Database
from errors import ValidationError
from models import AccrualResult, Student, UpcomingFee

logger = logging.getLogger(__name__)

# Active, billable, and not charged within the last month (cutoff bound as ?)
ELIGIBLE_FOR_ACCRUAL = """
    (left_date IS NULL OR left_date = '')
    AND monthly_fee > 0
    AND (last_fee_calculated_date IS NULL OR last_fee_calculated_date < ?)
"""


def accrual_cutoff(reference_date: date) -> str:
    return utils.roll_months(reference_date, -1).isoformat()


def run_monthly_accrual(store: Database, reference_date: date | str | None = None) -> AccrualResult:
    """
    Charge one month to every eligible student and stamp the run date.

    Each student is updated by its own conditional UPDATE that re-checks
    eligibility, so a second run with the same reference date changes
    nothing and a run interrupted half way can simply be repeated.
    Status is only ever forced to 'Pending' here, never back to 'Paid'.
    """
    try:
        ref = utils.to_iso(reference_date) or utils.today_iso()
    except ValueError:
        raise ValidationError({"reference_date": "reference_date must be a valid ISO date (YYYY-MM-DD)."})
    cutoff = accrual_cutoff(utils.parse_iso(ref))

    candidates = store.fetch_all(
        f"SELECT id, fee_due, monthly_fee FROM students WHERE {ELIGIBLE_FOR_ACCRUAL} ORDER BY id",
        (cutoff,),
    )

    affected = 0
    for row in candidates:
        changed = store.execute_rowcount(
            f"""
            UPDATE students
            SET fee_due = fee_due + monthly_fee,
                last_fee_calculated_date = ?,
                status = CASE WHEN monthly_fee > 0 AND (fee_due + monthly_fee) > 0 THEN 'Pending' ELSE status END
            WHERE id = ? AND {ELIGIBLE_FOR_ACCRUAL}
            """,
            (ref, row["id"], cutoff),
        )
        if changed:
            logger.debug(
                "Student %s charged %s (due %s -> %s)",
                row["id"], row["monthly_fee"], row["fee_due"], (row["fee_due"] or 0) + row["monthly_fee"],
            )
        affected += changed

    logger.info("Monthly fees calculated for %d students (reference date %s)", affected, ref)
    return AccrualResult(affected_count=affected, reference_date=ref)


def next_fee_date(student: Student) -> str | None:
    if not student.last_fee_calculated_date:
        return student.join_date
    return utils.roll_months(utils.parse_iso(student.last_fee_calculated_date), 1).isoformat()


def get_upcoming_fees(store: Database) -> list[UpcomingFee]:
    rows = store.fetch_all(
        """
        SELECT * FROM students
        WHERE (left_date IS NULL OR left_date = '') AND monthly_fee > 0
        """
    )
    upcoming = [UpcomingFee(student=s, next_fee_date=next_fee_date(s)) for s in map(Student.from_row, rows)]
    upcoming.sort(key=lambda u: (u.next_fee_date or "", u.student.id))
    return upcoming
