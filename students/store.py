"""In-memory student store.

Records live in a list in insertion order. All access goes through a single
reader/writer lock: ``list`` and ``get`` share it, ``create``, ``update`` and
``delete`` hold it exclusively. Records handed out are copies, so nothing a
caller does afterwards runs under the lock.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional

from students.models import Student, StudentIn


logger = logging.getLogger("student_api.store")

ID_STRATEGIES = {"counter", "size"}


class ReadWriteLock:
    """Many readers or one writer. Waiting writers block new readers."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writing or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class StudentStore:
    """Thread-safe collection of students keyed by an integer id.

    ``id_strategy`` picks how ids are assigned:

    - ``"counter"``: strictly increasing, never reused after a delete.
    - ``"size"``: current record count plus one. Deleting and then creating
      can hand out an id that is still in use.
    """

    def __init__(self, id_strategy: str = "counter") -> None:
        if id_strategy not in ID_STRATEGIES:
            raise ValueError(
                f"Unknown id strategy {id_strategy!r}, expected one of {sorted(ID_STRATEGIES)}"
            )
        self.id_strategy = id_strategy
        self._lock = ReadWriteLock()
        self._students: List[Student] = []
        self._last_id = 0

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._students)

    def list(self) -> List[Student]:
        with self._lock.read():
            return [student.model_copy() for student in self._students]

    def get(self, student_id: int) -> Optional[Student]:
        with self._lock.read():
            index = self._index_of(student_id)
            if index is None:
                return None
            return self._students[index].model_copy()

    def create(self, candidate: StudentIn) -> Student:
        with self._lock.write():
            student = Student.from_candidate(self._next_id(), candidate)
            self._students.append(student)
        logger.info("Created student id=%s", student.id)
        return student.model_copy()

    def update(self, student_id: int, candidate: StudentIn) -> Optional[Student]:
        with self._lock.write():
            index = self._index_of(student_id)
            if index is None:
                return None
            student = Student.from_candidate(student_id, candidate)
            self._students[index] = student
        logger.info("Updated student id=%s", student_id)
        return student.model_copy()

    def delete(self, student_id: int) -> bool:
        with self._lock.write():
            index = self._index_of(student_id)
            if index is None:
                return False
            del self._students[index]
        logger.info("Deleted student id=%s", student_id)
        return True

    # Callers must hold the lock.
    def _index_of(self, student_id: int) -> Optional[int]:
        for index, student in enumerate(self._students):
            if student.id == student_id:
                return index
        return None

    def _next_id(self) -> int:
        if self.id_strategy == "size":
            return len(self._students) + 1
        self._last_id += 1
        return self._last_id
