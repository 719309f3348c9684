"""
app.py
Streamlit Study Hall Management console (operator-only).
Run: streamlit run app.py
"""

from __future__ import annotations

import atexit
from datetime import date
import pandas as pd
import streamlit as st

import db
import fees
import halls
import reports
import students
import utils
from config import Config, configure_logging
from errors import StudyHallError

st.set_page_config(page_title="Study Hall Management System", layout="wide")


@st.cache_resource
def get_store() -> db.Database:
    # One store per process, closed when the server shuts down
    configure_logging()
    store = db.open_database(Config.DATABASE_PATH)
    atexit.register(store.close)
    return store


def report_error(exc: StudyHallError) -> None:
    st.error(str(exc))


def students_frame(rows) -> pd.DataFrame:
    return pd.DataFrame([{c: getattr(s, c) for c in utils.STUDENT_COLUMNS} for s in rows], columns=utils.STUDENT_COLUMNS)


def dashboard_page(store: db.Database):
    st.header("📊 Dashboard")

    summary = reports.get_dashboard_summary(store)

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total students", summary.total_students)
    c2.metric("Active students", summary.active_students)
    c3.metric("Left students", summary.left_students)
    c4.metric("Study halls", summary.total_halls)

    c5, c6, c7, c8 = st.columns(4)
    c5.metric("Monthly fees (active)", summary.monthly_fee_total)
    c6.metric("Fees collected", summary.total_fees)
    c7.metric("Fees pending", summary.pending_fees)
    c8.metric("Students with dues", summary.students_with_pending_fees)

    st.divider()

    st.subheader("Recently added students")
    recent = students.recent_students(store, Config.RECENT_STUDENTS_LIMIT)
    if recent:
        st.dataframe(students_frame(recent), use_container_width=True, hide_index=True)
    else:
        st.caption("No students yet.")


def student_form(store: db.Database, existing=None):
    if existing:
        st.subheader(f"✏️ Edit Student (ID: {existing.id})")
    else:
        st.subheader("➕ Add Student")

    hall_names = [h.name for h in halls.list_halls(store)]
    if existing and existing.hall not in hall_names:
        # keep orphaned hall names selectable
        hall_names.append(existing.hall)
    if not hall_names:
        st.info("Add a study hall first.")
        return

    col1, col2, col3 = st.columns(3)
    with col1:
        name = st.text_input("Name", value=(existing.name if existing else ""))
        phone = st.text_input("Phone", value=(existing.phone if existing else ""))
        cabin = st.text_input("Cabin", value=(existing.cabin if existing else ""))

    with col2:
        hall = st.selectbox(
            "Study hall",
            options=hall_names,
            index=(hall_names.index(existing.hall) if existing else 0),
        )
        join_date = st.date_input(
            "Join date", value=(utils.parse_iso(existing.join_date) if existing and existing.join_date else date.today())
        ).isoformat()
        monthly_fee = st.text_input("Monthly fee", value=(str(existing.monthly_fee) if existing else "0"))

    with col3:
        fee_paid = st.text_input("Fee paid", value=(str(existing.fee_paid) if existing else "0"))
        fee_due = st.text_input("Fee due", value=(str(existing.fee_due) if existing else "0"))
        left_date = None
        if existing and existing.left_date:
            left_date = st.date_input("Left date", value=utils.parse_iso(existing.left_date)).isoformat()

    errors = utils.validate_student_inputs(name, cabin, hall, phone, fee_paid, fee_due, monthly_fee, join_date)
    if errors:
        for e in errors.values():
            st.error(e)
    else:
        st.caption(f"Status on save: **{utils.derive_status(utils.parse_amount(fee_due))}**")

    if st.button("Save", type="primary", disabled=bool(errors)):
        try:
            if existing:
                students.update_student(
                    store, existing.id, name, cabin, hall, phone,
                    fee_paid, fee_due, monthly_fee, join_date, left_date,
                )
                st.success("Student updated.")
            else:
                students.create_student(store, name, cabin, hall, phone, fee_paid, fee_due, monthly_fee, join_date)
                st.success("Student added.")
        except StudyHallError as exc:
            report_error(exc)
            return
        st.rerun()


def students_page(store: db.Database):
    st.header("👥 Students")

    with st.sidebar:
        st.subheader("Search & Filters")
        search = st.text_input("Search (name/phone/cabin)")
        state_filter = st.selectbox("Membership", ["All", "Active", "Left"])

    rows = students.list_students(store)
    if search.strip():
        needle = search.strip().lower()
        rows = [s for s in rows if needle in s.name.lower() or needle in s.phone or needle in s.cabin.lower()]
    if state_filter == "Active":
        rows = [s for s in rows if s.is_active]
    elif state_filter == "Left":
        rows = [s for s in rows if not s.is_active]

    df = students_frame(rows)
    st.dataframe(df, use_container_width=True, hide_index=True)

    st.divider()

    colA, colB = st.columns([1, 2])
    with colA:
        st.subheader("Select student")
        selected_id = st.selectbox("Student ID", options=["(none)"] + [str(s.id) for s in rows])

    with colB:
        if selected_id != "(none)":
            s = students.get_student(store, int(selected_id))
            st.subheader("Student actions")
            c1, c2, c3 = st.columns(3)
            with c1:
                if st.button("Edit"):
                    st.session_state.edit_student_id = s.id
                    st.rerun()
            with c2:
                if s.is_active:
                    leave_on = st.date_input("Leave date", value=date.today())
                    if st.button("Mark as left"):
                        try:
                            students.mark_left(store, s.id, leave_on)
                        except StudyHallError as exc:
                            report_error(exc)
                        else:
                            st.success("Student marked as left.")
                            st.rerun()
                else:
                    st.caption(f"Left on {s.left_date}")
                    if st.button("Reactivate"):
                        try:
                            students.reactivate(store, s.id)
                        except StudyHallError as exc:
                            report_error(exc)
                        else:
                            st.success("Student reactivated.")
                            st.rerun()
            with c3:
                delete_confirm = st.checkbox("Confirm delete", value=False, key="del_confirm")
                if st.button("Delete", type="secondary", disabled=not delete_confirm):
                    try:
                        students.delete_student(store, s.id)
                    except StudyHallError as exc:
                        report_error(exc)
                    else:
                        st.success("Student deleted.")
                        st.rerun()

    st.divider()

    if st.session_state.get("edit_student_id"):
        try:
            existing = students.get_student(store, st.session_state.edit_student_id)
        except StudyHallError:
            existing = None
            st.session_state.edit_student_id = None
        if existing:
            student_form(store, existing=existing)
        if st.button("Cancel edit"):
            st.session_state.edit_student_id = None
            st.rerun()
    else:
        student_form(store, existing=None)


def halls_page(store: db.Database):
    st.header("🏫 Study Halls")

    rows = halls.list_halls(store)
    if rows:
        st.dataframe(
            pd.DataFrame([{"id": h.id, "name": h.name, "capacity": h.capacity, "location": h.location,
                           "description": h.description} for h in rows]),
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.caption("No study halls yet.")

    st.divider()

    options = {"(new hall)": None} | {f"{h.name} - ID {h.id}": h for h in rows}
    chosen = options[st.selectbox("Hall", list(options.keys()))]

    col1, col2 = st.columns(2)
    with col1:
        name = st.text_input("Name", value=(chosen.name if chosen else ""))
        capacity = st.text_input("Capacity", value=(str(chosen.capacity) if chosen else "30"))
    with col2:
        location = st.text_input("Location", value=(chosen.location if chosen else ""))
        description = st.text_input("Description (optional)", value=(chosen.description or "" if chosen else ""))

    if chosen and name.strip() != chosen.name:
        st.warning("Renaming a hall does not move its students; edit their hall afterwards.")

    c1, c2 = st.columns(2)
    with c1:
        if st.button("Save hall", type="primary"):
            try:
                if chosen:
                    halls.update_hall(store, chosen.id, name, capacity, location, description)
                    st.success("Study hall updated.")
                else:
                    halls.create_hall(store, name, capacity, location, description)
                    st.success("Study hall added.")
            except StudyHallError as exc:
                report_error(exc)
            else:
                st.rerun()
    with c2:
        if chosen:
            confirm = st.checkbox("Confirm delete", value=False, key="hall_del_confirm")
            if st.button("Delete hall", disabled=not confirm):
                try:
                    halls.delete_hall(store, chosen.id)
                except StudyHallError as exc:
                    report_error(exc)
                else:
                    st.success("Study hall deleted.")
                    st.rerun()


def fees_page(store: db.Database):
    st.header("💰 Fees")

    st.subheader("Monthly accrual")
    st.caption(
        "Adds one month's fee to every active student who has a monthly fee and "
        "was not charged within the last month. Safe to run more than once."
    )
    ref = st.date_input("Reference date", value=date.today())
    if st.button("Run monthly accrual", type="primary"):
        try:
            result = fees.run_monthly_accrual(store, ref)
        except StudyHallError as exc:
            report_error(exc)
        else:
            st.success(f"Monthly fees calculated for {result.affected_count} students.")

    st.divider()

    st.subheader("Upcoming fees")
    upcoming = fees.get_upcoming_fees(store)
    if upcoming:
        st.dataframe(
            pd.DataFrame(
                [
                    {
                        "next_fee_date": u.next_fee_date,
                        "id": u.student.id,
                        "name": u.student.name,
                        "hall": u.student.hall,
                        "cabin": u.student.cabin,
                        "monthly_fee": u.student.monthly_fee,
                        "fee_due": u.student.fee_due,
                    }
                    for u in upcoming
                ]
            ),
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.caption("No active students with a monthly fee.")


def reports_page(store: db.Database):
    st.header("🧾 Reports")

    st.subheader("Fee collection by hall")
    rows = reports.get_fee_collection_report(store)
    st.dataframe(utils.fee_report_to_frame(rows), use_container_width=True, hide_index=True)
    if rows:
        st.download_button(
            "Download fee_collection.csv",
            data=utils.fee_report_to_csv_bytes(rows),
            file_name="fee_collection.csv",
            mime="text/csv",
        )

    st.divider()

    st.subheader("Export students to CSV")
    all_students = students.list_students(store)
    if all_students:
        st.download_button(
            "Download students.csv",
            data=utils.students_to_csv_bytes(all_students),
            file_name="students.csv",
            mime="text/csv",
        )
    else:
        st.caption("No students to export.")

    st.divider()

    st.subheader("Fee breakdown per student")
    breakdown = reports.get_fee_breakdown(store)
    c1, c2, c3 = st.columns(3)
    c1.metric("Total paid", breakdown.total_fee_paid)
    c2.metric("Total due", breakdown.total_fee_due)
    c3.metric("Students with dues", breakdown.students_with_pending_fees)
    if breakdown.rows:
        st.dataframe(pd.DataFrame(list(breakdown.rows)), use_container_width=True, hide_index=True)


def settings_page(store: db.Database):
    st.header("⚙️ Settings")

    st.subheader("Database")
    counts = reports.get_store_counts(store)
    st.write(f"File: `{store.path}` | Students: **{counts['students']}** | Study halls: **{counts['study_halls']}**")

    st.divider()

    st.subheader("Sample data")
    st.caption("Insert 2 sample halls + 3 sample students for testing (adds new students each run).")
    if st.button("Insert sample data"):
        utils.insert_sample_data(store)
        st.success("Sample data inserted.")
        st.rerun()


def main_app(store: db.Database):
    st.sidebar.title("🎓 Study Hall System")

    pages = ["Dashboard", "Students", "Study Halls", "Fees", "Reports", "Settings"]
    if "page" not in st.session_state:
        st.session_state.page = "Dashboard"
    st.session_state.page = st.sidebar.radio("Navigate", pages, index=pages.index(st.session_state.page))

    if st.session_state.page == "Dashboard":
        dashboard_page(store)
    elif st.session_state.page == "Students":
        students_page(store)
    elif st.session_state.page == "Study Halls":
        halls_page(store)
    elif st.session_state.page == "Fees":
        fees_page(store)
    elif st.session_state.page == "Reports":
        reports_page(store)
    elif st.session_state.page == "Settings":
        settings_page(store)


# --------- App entry ---------

def run():
    try:
        store = get_store()
    except StudyHallError as exc:
        report_error(exc)
        return
    main_app(store)


if __name__ == "__main__":
    run()
