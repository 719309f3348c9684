"""
halls.py
Study hall records. Students point at a hall by its name.
"""

from __future__ import annotations

import logging
import sqlite3

import utils
from db import Database
from errors import Conflict, DuplicateName, NotFound, ValidationError
from models import StudyHall

logger = logging.getLogger(__name__)


def get_hall(store: Database, hall_id: int) -> StudyHall:
    row = store.fetch_one("SELECT * FROM study_halls WHERE id = ?", (hall_id,))
    if not row:
        raise NotFound("Study hall", hall_id)
    return StudyHall.from_row(row)


def list_halls(store: Database) -> list[StudyHall]:
    rows = store.fetch_all("SELECT * FROM study_halls ORDER BY name")
    return [StudyHall.from_row(r) for r in rows]


def _clean(name, capacity, location, description) -> tuple:
    errors = utils.validate_hall_inputs(name, capacity, location)
    if errors:
        raise ValidationError(errors)
    return name.strip(), int(str(capacity).strip()), location.strip(), (description or "").strip()


def create_hall(store: Database, name: str, capacity, location: str, description: str | None = None) -> int:
    params = _clean(name, capacity, location, description)
    try:
        hall_id = store.execute(
            "INSERT INTO study_halls(name, capacity, location, description) VALUES(?,?,?,?)",
            params,
        )
    except sqlite3.IntegrityError as exc:
        raise DuplicateName(params[0]) from exc
    logger.info("Study hall %s '%s' added", hall_id, params[0])
    return hall_id


def update_hall(
    store: Database, hall_id: int, name: str, capacity, location: str, description: str | None = None
) -> None:
    """
    Renaming a hall does not touch students.hall; their old hall name
    becomes an orphan until the caller edits them too.
    """
    params = _clean(name, capacity, location, description)
    try:
        changed = store.execute_rowcount(
            "UPDATE study_halls SET name=?, capacity=?, location=?, description=? WHERE id=?",
            params + (hall_id,),
        )
    except sqlite3.IntegrityError as exc:
        raise DuplicateName(params[0]) from exc
    if changed == 0:
        raise NotFound("Study hall", hall_id)
    logger.info("Study hall %s updated", hall_id)


def delete_hall(store: Database, hall_id: int) -> None:
    hall = get_hall(store, hall_id)
    count = store.scalar("SELECT COUNT(*) FROM students WHERE hall = ?", (hall.name,))
    if count:
        raise Conflict(
            f"Cannot delete study hall '{hall.name}': {count} student(s) assigned to it.",
            hall_id=hall_id,
            student_count=count,
        )

    changed = store.execute_rowcount("DELETE FROM study_halls WHERE id = ?", (hall_id,))
    if changed == 0:
        raise NotFound("Study hall", hall_id)
    logger.info("Study hall %s '%s' deleted", hall_id, hall.name)
