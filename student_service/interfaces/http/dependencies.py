from fastapi import Request

from ...infrastructure.repositories import InMemoryStudentRepository, InMemoryUserRepository


def get_student_repo(request: Request) -> InMemoryStudentRepository:
    return request.app.state.students


def get_user_repo(request: Request) -> InMemoryUserRepository:
    return request.app.state.users
