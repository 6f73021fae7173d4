from datetime import timedelta
from typing import Any

from ..domain.entities import PublicUser, Student, User
from .dto import StudentCriteria


class IStudentRepository:
    def find_all(self) -> list[Student]: ...
    def find_by_id(self, student_id: Any) -> Student | None: ...
    def find_by_email(self, email: str) -> Student | None: ...
    def create(self, data: dict) -> Student: ...
    def update(self, student_id: Any, changes: dict) -> Student: ...
    def delete(self, student_id: Any) -> Student: ...
    def search(self, criteria: StudentCriteria, match_any: bool = False) -> list[Student]: ...
    def count(self) -> int: ...


class IUserRepository:
    def find_by_email(self, email: str) -> User | None: ...
    def find_by_id(self, user_id: Any) -> User | None: ...
    def create(self, email: str, password: str, name: str, role: str = "user") -> PublicUser: ...
    def validate_password(self, user: User, password: str) -> bool: ...
    def get_all(self) -> list[PublicUser]: ...


class IPasswordHasher:
    def hash(self, plain: str) -> str: ...
    def verify(self, plain: str, hashed: str) -> bool: ...


class ITokenService:
    def issue(self, user: PublicUser, expires_delta: timedelta | None = None) -> str: ...
    def verify(self, token: str) -> dict: ...
