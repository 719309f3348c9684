"""
errors.py
Error taxonomy shared by the ledger operations and the console.
"""

from __future__ import annotations


class StudyHallError(Exception):
    """Base class for every error the ledger reports to its caller."""


class ValidationError(StudyHallError):
    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(self.errors.values()) or "Invalid input.")

    @property
    def fields(self) -> list[str]:
        return list(self.errors)


class NotFound(StudyHallError):
    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found (id={entity_id}).")


class DuplicateName(StudyHallError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Study hall with the name '{name}' already exists.")


class Conflict(StudyHallError):
    def __init__(self, message: str, hall_id=None, student_count: int = 0):
        self.hall_id = hall_id
        self.student_count = student_count
        super().__init__(message)


class StoreUnavailable(StudyHallError):
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Record store failed during: {operation}")
