import itertools
from dataclasses import replace
from datetime import date, datetime, timezone
from threading import Lock
from typing import Any

import structlog

from ..application.dto import StudentCriteria
from ..application.ports import IPasswordHasher, IStudentRepository, IUserRepository
from ..domain.entities import PublicUser, Role, Student, User
from ..domain.errors import DuplicateEmailError, StudentNotFoundError

logger = structlog.get_logger()

STUDENT_FIELDS = ("name", "email", "age", "grade", "major", "gpa", "enrollment_date")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _coerce_id(value: Any) -> int | None:
    """Numeric ids only; anything else never matches."""
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _coerce_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _normalize(data: dict) -> dict:
    fields = {k: v for k, v in data.items() if k in STUDENT_FIELDS}
    if "age" in fields:
        fields["age"] = int(fields["age"])
    if "gpa" in fields:
        fields["gpa"] = float(fields["gpa"])
    if "grade" in fields:
        fields["grade"] = getattr(fields["grade"], "value", fields["grade"])
    if "enrollment_date" in fields:
        fields["enrollment_date"] = _coerce_date(fields["enrollment_date"])
    return fields


class InMemoryStudentRepository(IStudentRepository):
    """Process-local student store.

    Ids come from a counter that only moves forward, so an id freed by
    ``delete`` is never handed out again. Every operation holds ``_lock``:
    sync route handlers run on a threadpool and share one instance.
    """

    def __init__(self):
        self._rows: list[Student] = []
        self._ids = itertools.count(1)
        self._lock = Lock()

    def _index_of(self, student_id: Any) -> int:
        sid = _coerce_id(student_id)
        for i, row in enumerate(self._rows):
            if row.id == sid:
                return i
        return -1

    def _email_taken(self, email: str, exclude_id: int | None = None) -> bool:
        return any(r.email == email and r.id != exclude_id for r in self._rows)

    def find_all(self) -> list[Student]:
        with self._lock:
            return list(self._rows)

    def find_by_id(self, student_id: Any) -> Student | None:
        with self._lock:
            i = self._index_of(student_id)
            return self._rows[i] if i >= 0 else None

    def find_by_email(self, email: str) -> Student | None:
        with self._lock:
            return next((r for r in self._rows if r.email == email), None)

    def create(self, data: dict) -> Student:
        fields = _normalize(data)
        missing = [f for f in STUDENT_FIELDS if f not in fields]
        if missing:
            raise ValueError(f"missing student fields: {', '.join(missing)}")
        with self._lock:
            if self._email_taken(fields["email"]):
                raise DuplicateEmailError("Student with this email already exists")
            now = _now()
            row = Student(id=next(self._ids), created_at=now, updated_at=now, **fields)
            self._rows.append(row)
        logger.info("student_created", student_id=row.id)
        return row

    def update(self, student_id: Any, changes: dict) -> Student:
        fields = _normalize(changes)
        with self._lock:
            i = self._index_of(student_id)
            if i < 0:
                raise StudentNotFoundError()
            current = self._rows[i]
            if "email" in fields and self._email_taken(fields["email"], exclude_id=current.id):
                raise DuplicateEmailError("Student with this email already exists")
            # id is never taken from the payload
            row = replace(current, **fields, updated_at=max(_now(), current.updated_at))
            self._rows[i] = row
        logger.info("student_updated", student_id=row.id, fields=sorted(fields))
        return row

    def delete(self, student_id: Any) -> Student:
        with self._lock:
            i = self._index_of(student_id)
            if i < 0:
                raise StudentNotFoundError()
            row = self._rows.pop(i)
        logger.info("student_deleted", student_id=row.id)
        return row

    def search(self, criteria: StudentCriteria, match_any: bool = False) -> list[Student]:
        pairs = [(k, v.lower()) for k, v in criteria.items()]
        if not pairs:
            return self.find_all()
        combine = any if match_any else all
        with self._lock:
            return [
                r for r in self._rows
                if combine(needle in str(getattr(r, k)).lower() for k, needle in pairs)
            ]

    def count(self) -> int:
        with self._lock:
            return len(self._rows)


class InMemoryUserRepository(IUserRepository):
    def __init__(self, hasher: IPasswordHasher):
        self.hasher = hasher
        self._rows: list[User] = []
        self._ids = itertools.count(1)
        self._lock = Lock()

    def find_by_email(self, email: str) -> User | None:
        with self._lock:
            return next((u for u in self._rows if u.email == email), None)

    def find_by_id(self, user_id: Any) -> User | None:
        uid = _coerce_id(user_id)
        with self._lock:
            return next((u for u in self._rows if u.id == uid), None)

    def create(self, email: str, password: str, name: str, role: str = Role.USER.value) -> PublicUser:
        with self._lock:
            self._check_email_free(email)
        # bcrypt is slow on purpose, keep it out of the lock
        password_hash = self.hasher.hash(password)
        with self._lock:
            self._check_email_free(email)
            row = User(
                id=next(self._ids),
                email=email,
                name=name,
                role=role or Role.USER.value,
                created_at=_now(),
                password_hash=password_hash,
            )
            self._rows.append(row)
        return row.to_public()

    def _check_email_free(self, email: str) -> None:
        if any(u.email == email for u in self._rows):
            raise DuplicateEmailError("User with this email already exists")

    def validate_password(self, user: User, password: str) -> bool:
        return self.hasher.verify(password, user.password_hash)

    def get_all(self) -> list[PublicUser]:
        with self._lock:
            return [u.to_public() for u in self._rows]
