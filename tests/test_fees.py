"""
Tests for monthly fee accrual and the upcoming-fees view.

Verifies that run_monthly_accrual:
- Charges active students with a monthly fee that were never charged
- Is idempotent for the same reference date
- Skips departed and fee-exempt students
- Only forces 'Pending', never 'Paid'
"""

from datetime import date

import pytest

import fees
import students
from errors import ValidationError


class TestMonthlyAccrual:

    def test_first_cycle_charges_monthly_fee(self, store, make_student):
        """Student A: 500/month, joined 2024-01-01, accrued on 2024-02-02."""
        sid = make_student(name="A", monthly_fee=500, fee_due=0, join_date="2024-01-01")

        result = fees.run_monthly_accrual(store, "2024-02-02")

        s = students.get_student(store, sid)
        assert result.affected_count == 1
        assert result.reference_date == "2024-02-02"
        assert s.fee_due == 500
        assert s.last_fee_calculated_date == "2024-02-02"
        assert s.status == "Pending"

    def test_second_run_same_date_is_noop(self, store, make_student):
        a = make_student(name="A", monthly_fee=500)
        b = make_student(name="B", monthly_fee=300, fee_due=100)

        first = fees.run_monthly_accrual(store, date(2024, 5, 1))
        second = fees.run_monthly_accrual(store, date(2024, 5, 1))

        assert first.affected_count == 2
        assert second.affected_count == 0
        assert students.get_student(store, a).fee_due == 500
        assert students.get_student(store, b).fee_due == 400

    def test_affected_balance_grows_by_exactly_one_fee(self, store, make_student):
        sid = make_student(monthly_fee=750, fee_paid=100, fee_due=250,
                           last_fee_calculated_date="2024-01-10")

        fees.run_monthly_accrual(store, "2024-03-01")

        s = students.get_student(store, sid)
        assert s.fee_due == 1000
        assert s.fee_paid == 100
        assert s.last_fee_calculated_date == "2024-03-01"

    def test_departed_student_never_charged(self, store, make_student):
        sid = make_student(monthly_fee=500, left_date="2024-01-15")

        result = fees.run_monthly_accrual(store, "2024-06-01")

        assert result.affected_count == 0
        assert students.get_student(store, sid).fee_due == 0

    def test_exempt_student_not_charged(self, store, make_student):
        sid = make_student(monthly_fee=0, fee_due=0)

        assert fees.run_monthly_accrual(store, "2024-06-01").affected_count == 0
        assert students.get_student(store, sid).status == "Paid"

    def test_stamp_within_last_month_not_charged(self, store, make_student):
        """Charged on 2024-02-15: not eligible again until after 2024-03-15."""
        make_student(monthly_fee=500, last_fee_calculated_date="2024-02-15")

        assert fees.run_monthly_accrual(store, "2024-03-15").affected_count == 0
        assert fees.run_monthly_accrual(store, "2024-03-16").affected_count == 1

    def test_cutoff_rolls_past_short_month(self):
        """One month before 2024-03-31 rolls forward to 2024-03-02."""
        assert fees.accrual_cutoff(date(2024, 3, 31)) == "2024-03-02"

    def test_leap_day_stamp_charged_at_month_end(self, store, make_student):
        """Charged on 2024-02-29: a full month has passed by 2024-03-31."""
        sid = make_student(monthly_fee=500, last_fee_calculated_date="2024-02-29")

        result = fees.run_monthly_accrual(store, "2024-03-31")

        s = students.get_student(store, sid)
        assert result.affected_count == 1
        assert s.fee_due == 500
        assert s.last_fee_calculated_date == "2024-03-31"

    def test_status_only_forced_to_pending(self, store, make_student):
        """A 'Paid' student becomes 'Pending' once charged."""
        sid = make_student(monthly_fee=200, fee_due=0)

        fees.run_monthly_accrual(store, "2024-04-01")

        assert students.get_student(store, sid).status == "Pending"

    def test_balance_landing_on_zero_keeps_prior_status(self, store, make_student):
        """A credit of -200 plus a 200 fee lands on 0; status is not forced to 'Paid'."""
        sid = make_student(monthly_fee=200, fee_due=50)
        store.execute("UPDATE students SET fee_due = -200 WHERE id = ?", (sid,))

        fees.run_monthly_accrual(store, "2024-04-01")

        s = students.get_student(store, sid)
        assert s.fee_due == 0
        assert s.status == "Pending"

    def test_reactivated_student_is_not_back_billed(self, store, make_student):
        sid = make_student(monthly_fee=500, last_fee_calculated_date="2024-01-01")
        students.mark_left(store, sid, "2024-01-20")
        fees.run_monthly_accrual(store, "2024-05-01")
        students.reactivate(store, sid)

        result = fees.run_monthly_accrual(store, "2024-06-01")

        s = students.get_student(store, sid)
        assert result.affected_count == 1
        assert s.fee_due == 500

    def test_empty_store(self, store):
        assert fees.run_monthly_accrual(store, "2024-01-01").affected_count == 0

    def test_defaults_to_today(self, store, make_student):
        sid = make_student(monthly_fee=100)

        result = fees.run_monthly_accrual(store)

        assert result.reference_date == date.today().isoformat()
        assert students.get_student(store, sid).last_fee_calculated_date == date.today().isoformat()

    def test_invalid_reference_date(self, store):
        with pytest.raises(ValidationError) as exc_info:
            fees.run_monthly_accrual(store, "02/02/2024")
        assert exc_info.value.fields == ["reference_date"]


class TestUpcomingFees:

    def test_next_fee_date_from_join_then_from_stamp(self, store, make_student):
        sid = make_student(monthly_fee=500, join_date="2024-03-10")

        before = fees.get_upcoming_fees(store)
        fees.run_monthly_accrual(store, "2024-03-10")
        after = fees.get_upcoming_fees(store)

        assert [(u.student.id, u.next_fee_date) for u in before] == [(sid, "2024-03-10")]
        assert [(u.student.id, u.next_fee_date) for u in after] == [(sid, "2024-04-10")]

    def test_sorted_and_filtered(self, store, make_student):
        late = make_student(name="Late", monthly_fee=100, join_date="2024-05-01")
        early = make_student(name="Early", monthly_fee=100, join_date="2024-01-01",
                             last_fee_calculated_date="2024-02-01")
        make_student(name="Exempt", monthly_fee=0, join_date="2023-01-01")
        make_student(name="Gone", monthly_fee=100, join_date="2023-01-01", left_date="2023-06-01")

        upcoming = fees.get_upcoming_fees(store)

        assert [u.student.id for u in upcoming] == [early, late]
        assert upcoming[0].next_fee_date == "2024-03-01"

    def test_month_end_stamp(self, store, make_student):
        make_student(monthly_fee=100, last_fee_calculated_date="2024-01-31")

        assert fees.get_upcoming_fees(store)[0].next_fee_date == "2024-03-02"

    def test_empty(self, store):
        assert fees.get_upcoming_fees(store) == []
