"""
reports.py
Read-only financial summaries, always computed from the current ledger.
"""

from __future__ import annotations

import logging

from db import Database
from models import DashboardSummary, FeeBreakdown, HallCollection

logger = logging.getLogger(__name__)


def get_dashboard_summary(store: Database) -> DashboardSummary:
    row = store.fetch_one(
        """
        SELECT
            (SELECT COUNT(*) FROM students) AS total_students,
            (SELECT COUNT(*) FROM study_halls) AS total_halls,
            (SELECT COUNT(*) FROM students WHERE left_date IS NULL OR left_date = '') AS active_students,
            (SELECT COUNT(*) FROM students WHERE left_date IS NOT NULL AND left_date != '') AS left_students,
            (SELECT COALESCE(SUM(monthly_fee), 0) FROM students
                WHERE left_date IS NULL OR left_date = '') AS monthly_fee_total,
            (SELECT COALESCE(SUM(fee_paid), 0) FROM students) AS total_fees,
            (SELECT COALESCE(SUM(fee_due), 0) FROM students) AS pending_fees,
            (SELECT COALESCE(SUM(COALESCE(fee_paid, 0) + COALESCE(fee_due, 0)), 0) FROM students) AS total_fee_amount,
            (SELECT COUNT(*) FROM students WHERE fee_due > 0) AS students_with_pending_fees
        """
    )
    summary = DashboardSummary(**{k: int(row[k] or 0) for k in row.keys()})
    logger.debug("Dashboard summary: %s", summary)
    return summary


def get_fee_collection_report(store: Database) -> list[HallCollection]:
    """
    One row per study hall (halls without students included), by hall name.
    Students whose hall name matches no hall do not appear here.
    """
    rows = store.fetch_all(
        """
        SELECT
            sh.name AS hall,
            COUNT(s.id) AS total_students,
            COALESCE(SUM(s.fee_paid), 0) AS fees_collected,
            COALESCE(SUM(s.fee_due), 0) AS fees_pending,
            COALESCE(SUM(COALESCE(s.fee_paid, 0) + COALESCE(s.fee_due, 0)), 0) AS total_fee_amount
        FROM study_halls sh
        LEFT JOIN students s ON sh.name = s.hall
        GROUP BY sh.id, sh.name
        ORDER BY sh.name
        """
    )

    report = []
    for r in rows:
        total = int(r["total_fee_amount"])
        collected = int(r["fees_collected"])
        # no students or nothing billed: rate is exactly 0
        rate = 0 if r["total_students"] == 0 or total == 0 else round(collected * 100.0 / total, 1)
        report.append(
            HallCollection(
                hall=r["hall"],
                total_students=int(r["total_students"]),
                fees_collected=collected,
                fees_pending=int(r["fees_pending"]),
                total_fee_amount=total,
                collection_rate=rate,
            )
        )
    return report


def get_fee_breakdown(store: Database) -> FeeBreakdown:
    rows = store.fetch_all(
        """
        SELECT id, name, fee_paid, fee_due, monthly_fee, status,
               (COALESCE(fee_paid, 0) + COALESCE(fee_due, 0)) AS total_amount
        FROM students
        ORDER BY name
        """
    )
    detail = [dict(r) for r in rows]
    return FeeBreakdown(
        total_students=len(detail),
        total_fee_paid=sum(d["fee_paid"] or 0 for d in detail),
        total_fee_due=sum(d["fee_due"] or 0 for d in detail),
        students_with_pending_fees=sum(1 for d in detail if (d["fee_due"] or 0) > 0),
        rows=tuple(detail),
    )


def get_store_counts(store: Database) -> dict[str, int]:
    return {
        "students": int(store.scalar("SELECT COUNT(*) FROM students")),
        "study_halls": int(store.scalar("SELECT COUNT(*) FROM study_halls")),
    }
