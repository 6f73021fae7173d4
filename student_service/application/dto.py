from dataclasses import dataclass

from ..domain.entities import PublicUser


@dataclass
class RegisterUserInput:
    email: str
    password: str
    name: str


@dataclass
class StudentCriteria:
    name: str | None = None
    major: str | None = None
    grade: str | None = None

    @classmethod
    def from_term(cls, term: str) -> "StudentCriteria":
        return cls(name=term, major=term, grade=term)

    def is_empty(self) -> bool:
        return not (self.name or self.major or self.grade)

    def items(self) -> list[tuple[str, str]]:
        """Supplied (field, needle) pairs; blank criteria are wildcards."""
        pairs = [("name", self.name), ("major", self.major), ("grade", self.grade)]
        return [(k, v) for k, v in pairs if v]


@dataclass
class LoginResult:
    token: str
    user: PublicUser
