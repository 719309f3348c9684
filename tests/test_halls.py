"""
Tests for study hall records: unique names and delete protection.
"""

import pytest

import halls
import students
from errors import Conflict, DuplicateName, NotFound, ValidationError


class TestStudyHalls:

    def test_create_and_get(self, store):
        hall_id = halls.create_hall(store, " Hall A ", "40", "Ground floor")

        hall = halls.get_hall(store, hall_id)
        assert hall.name == "Hall A"
        assert hall.capacity == 40
        assert hall.description == ""

    def test_listed_by_name(self, store, make_hall):
        make_hall("Zeta")
        make_hall("Alpha")

        assert [h.name for h in halls.list_halls(store)] == ["Alpha", "Zeta"]

    def test_duplicate_name(self, store, make_hall):
        make_hall("Hall A")

        with pytest.raises(DuplicateName) as exc_info:
            halls.create_hall(store, "Hall A", 10, "Annex")
        assert exc_info.value.name == "Hall A"

    def test_rename_onto_existing_name(self, store, make_hall):
        make_hall("Hall A")
        other = make_hall("Hall B")

        with pytest.raises(DuplicateName):
            halls.update_hall(store, other, "Hall A", 10, "Annex")

    @pytest.mark.parametrize("capacity", [0, -3, "", "many", None])
    def test_capacity_must_be_positive(self, store, capacity):
        with pytest.raises(ValidationError) as exc_info:
            halls.create_hall(store, "Hall A", capacity, "Ground floor")
        assert exc_info.value.fields == ["capacity"]

    def test_missing_name_and_location(self, store):
        with pytest.raises(ValidationError) as exc_info:
            halls.create_hall(store, "", 10, None)
        assert sorted(exc_info.value.fields) == ["location", "name"]

    def test_non_text_name_and_location(self, store):
        with pytest.raises(ValidationError) as exc_info:
            halls.create_hall(store, 7, 10, {"floor": 1})
        assert exc_info.value.errors == {"name": "Hall name must be text.", "location": "Location must be text."}

    def test_update(self, store, make_hall):
        hall_id = make_hall("Hall A")

        halls.update_hall(store, hall_id, "Hall A", 55, "Second floor", "Quiet zone")

        hall = halls.get_hall(store, hall_id)
        assert (hall.capacity, hall.location, hall.description) == (55, "Second floor", "Quiet zone")

    def test_update_unknown(self, store):
        with pytest.raises(NotFound):
            halls.update_hall(store, 7, "Hall A", 10, "Annex")

    def test_rename_leaves_students_on_old_name(self, store, make_hall, make_student):
        hall_id = make_hall("Hall A")
        sid = make_student(hall="Hall A")

        halls.update_hall(store, hall_id, "Hall Z", 30, "Ground floor")

        assert students.get_student(store, sid).hall == "Hall A"

    def test_delete_blocked_until_students_leave_the_hall(self, store, make_hall, make_student):
        hall_id = make_hall("Hall A")
        sid = make_student(hall="Hall A")

        with pytest.raises(Conflict) as exc_info:
            halls.delete_hall(store, hall_id)
        assert exc_info.value.student_count == 1

        students.delete_student(store, sid)
        halls.delete_hall(store, hall_id)

        with pytest.raises(NotFound):
            halls.get_hall(store, hall_id)

    def test_departed_students_still_block_delete(self, store, make_hall, make_student):
        hall_id = make_hall("Hall A")
        make_student(hall="Hall A", left_date="2024-01-01")

        with pytest.raises(Conflict):
            halls.delete_hall(store, hall_id)

    def test_delete_unknown(self, store):
        with pytest.raises(NotFound):
            halls.delete_hall(store, 1)
