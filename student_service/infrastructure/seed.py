import structlog

from ..application.ports import IStudentRepository, IUserRepository
from ..domain.entities import Role

logger = structlog.get_logger()

DEMO_STUDENTS = [
    {
        "name": "John Doe",
        "email": "john.doe@student.edu",
        "age": 20,
        "grade": "Sophomore",
        "major": "Computer Science",
        "gpa": 3.8,
        "enrollment_date": "2023-09-01",
    },
    {
        "name": "Jane Smith",
        "email": "jane.smith@student.edu",
        "age": 19,
        "grade": "Freshman",
        "major": "Mathematics",
        "gpa": 3.9,
        "enrollment_date": "2023-09-01",
    },
]

DEMO_ADMIN_EMAIL = "admin@example.com"


def seed_demo_data(students: IStudentRepository, users: IUserRepository, admin_password: str) -> None:
    """Load the sample records a fresh instance starts with."""
    for data in DEMO_STUDENTS:
        students.create(data)
    users.create(
        email=DEMO_ADMIN_EMAIL,
        password=admin_password,
        name="Admin User",
        role=Role.ADMIN.value,
    )
    logger.info("demo_data_seeded", students=len(DEMO_STUDENTS), users=1)
