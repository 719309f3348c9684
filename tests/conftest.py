# tests/conftest.py

import pytest

import db
import halls
import students


@pytest.fixture
def store(tmp_path):
    """A fresh SQLite store per test, closed afterwards."""
    database = db.open_database(tmp_path / "studyhall_test.db")
    yield database
    database.close()


@pytest.fixture
def make_hall(store):
    def _make(name="Hall A", capacity=30, location="Ground floor", description=None):
        return halls.create_hall(store, name, capacity, location, description)

    return _make


@pytest.fixture
def make_student(store):
    """Create a student; extra columns (e.g. last_fee_calculated_date) are set directly."""

    def _make(name="Student", cabin="C-1", hall="Hall A", phone="9000000000", **fields):
        extra = {k: fields.pop(k) for k in ("left_date", "last_fee_calculated_date", "status") if k in fields}
        student_id = students.create_student(store, name, cabin, hall, phone, **fields)
        for column, value in extra.items():
            store.execute(f"UPDATE students SET {column} = ? WHERE id = ?", (value, student_id))
        return student_id

    return _make
