from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class Grade(str, Enum):
    FRESHMAN = "Freshman"
    SOPHOMORE = "Sophomore"
    JUNIOR = "Junior"
    SENIOR = "Senior"
    GRADUATE = "Graduate"


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


@dataclass(frozen=True)
class Student:
    id: int
    name: str
    email: str
    age: int
    grade: str
    major: str
    gpa: float
    enrollment_date: date
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class PublicUser:
    id: int
    email: str
    name: str
    role: str = Role.USER.value
    created_at: datetime | None = None


@dataclass(frozen=True)
class User(PublicUser):
    """Stored account record. Only the store ever sees ``password_hash``."""
    password_hash: str = ""

    def to_public(self) -> PublicUser:
        return PublicUser(
            id=self.id,
            email=self.email,
            name=self.name,
            role=self.role,
            created_at=self.created_at,
        )
