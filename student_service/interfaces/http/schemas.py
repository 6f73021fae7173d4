import re
from datetime import date, datetime

from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from ...domain.entities import Grade

MIN_TEXT_LENGTH = 2
MIN_PASSWORD_LENGTH = 6
ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}(?:[Tt ]\S+)?$")

# one message per field, reported whatever rule the value broke
FIELD_MESSAGES = {
    "name": "Name must be at least 2 characters long",
    "email": "Please provide a valid email",
    "age": "Age must be between 16 and 100",
    "grade": "Invalid grade level",
    "major": "Major must be at least 2 characters long",
    "gpa": "GPA must be between 0.0 and 4.0",
    "enrollmentDate": "Enrollment date must be a valid date",
    "password": f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
}


def _trimmed(value: str) -> str:
    value = value.strip()
    if len(value) < MIN_TEXT_LENGTH:
        raise ValueError(f"must be at least {MIN_TEXT_LENGTH} characters long")
    return value


def _strip(value):
    return value.strip() if isinstance(value, str) else value


def _iso_date(value):
    """ISO-8601 date or timestamp -> its calendar date. Numbers are not dates."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not ISO_DATE.match(value):
        raise ValueError("must be an ISO-8601 date")
    if len(value) == 10:
        return date.fromisoformat(value)
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value).date()

class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class StudentCreate(CamelModel):
    name: str
    email: EmailStr
    age: int = Field(ge=16, le=100)
    grade: Grade
    major: str
    gpa: float = Field(ge=0.0, le=4.0)
    enrollment_date: date

    @field_validator("name", "major")
    @classmethod
    def check_text(cls, value: str) -> str:
        return _trimmed(value)

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value):
        return _strip(value)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("enrollment_date", mode="before")
    @classmethod
    def parse_enrollment_date(cls, value):
        return _iso_date(value)


class StudentUpdate(CamelModel):
    name: str | None = None
    email: EmailStr | None = None
    age: int | None = Field(default=None, ge=16, le=100)
    grade: Grade | None = None
    major: str | None = None
    gpa: float | None = Field(default=None, ge=0.0, le=4.0)
    enrollment_date: date | None = None

    @field_validator("name", "major")
    @classmethod
    def check_text(cls, value: str | None) -> str | None:
        return None if value is None else _trimmed(value)

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value):
        return _strip(value)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return None if value is None else value.lower()

    @field_validator("enrollment_date", mode="before")
    @classmethod
    def parse_enrollment_date(cls, value):
        return None if value is None else _iso_date(value)

    def changes(self) -> dict:
        """Fields the client actually sent, keyed by attribute name."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class StudentOut(CamelModel):
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


class RegisterReq(BaseModel):
    name: str
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _trimmed(value)

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value):
        return _strip(value)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class LoginReq(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value):
        return _strip(value)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class UserOut(CamelModel):
    id: int
    email: str
    name: str
    role: str
    created_at: datetime | None = None


class StudentResp(BaseModel):
    message: str
    student: StudentOut


class StudentListResp(BaseModel):
    message: str
    count: int
    students: list[StudentOut]


class SearchResp(StudentListResp):
    query: str


class UserResp(BaseModel):
    message: str
    user: UserOut


class UserListResp(BaseModel):
    message: str
    count: int
    users: list[UserOut]


class TokenResp(BaseModel):
    message: str
    token: str
    token_type: str = "bearer"
    user: UserOut
