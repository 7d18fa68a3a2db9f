"""
Duplicate detection: same title, same subject, due on the same calendar day.
"""
from datetime import date, datetime
from typing import Any, Iterable, Set, Tuple

DuplicateKey = Tuple[str, str, date]


def duplicate_key(title: str, subject: str, due_date: datetime) -> DuplicateKey:
    return (title, subject, due_date.date())


class DuplicateIndex:
    """In-memory (title, subject, day) index over one user's assignments.

    Built once per import; add() every assignment created during the upload so
    later rows in the same file see it.
    """

    def __init__(self, assignments: Iterable[Any] = ()):
        self._keys: Set[DuplicateKey] = set()
        for assignment in assignments:
            self.add(assignment.title, assignment.subject, assignment.due_date)

    def __len__(self) -> int:
        return len(self._keys)

    def add(self, title: str, subject: str, due_date: datetime) -> None:
        self._keys.add(duplicate_key(title, subject, due_date))

    def is_duplicate(self, title: str, subject: str, due_date: datetime) -> bool:
        return duplicate_key(title, subject, due_date) in self._keys
