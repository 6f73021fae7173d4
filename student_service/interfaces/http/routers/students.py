from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ....application.dto import StudentCriteria
from ....domain.errors import DuplicateEmailError, StudentNotFoundError
from ....infrastructure.repositories import InMemoryStudentRepository
from ..authz import require_auth
from ..dependencies import get_student_repo
from ..schemas import SearchResp, StudentCreate, StudentListResp, StudentOut, StudentResp, StudentUpdate

# every student route sits behind the bearer token check
router = APIRouter(prefix="/students", tags=["students"], dependencies=[Depends(require_auth)])


def _out(rows) -> list[StudentOut]:
    return [StudentOut.model_validate(r) for r in rows]


def _not_found(error: str, student_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"error": error, "message": f"No student found with ID {student_id}"},
    )


@router.get("", response_model=StudentListResp)
def list_students(
    name: str | None = Query(None),
    major: str | None = Query(None),
    grade: str | None = Query(None),
    repo: InMemoryStudentRepository = Depends(get_student_repo),
):
    criteria = StudentCriteria(name=name, major=major, grade=grade)
    rows = repo.find_all() if criteria.is_empty() else repo.search(criteria)
    return StudentListResp(message="Students retrieved successfully", count=len(rows), students=_out(rows))


@router.get("/search/{query}", response_model=SearchResp)
def search_students(
    query: str,
    match: Literal["all", "any"] = Query("all"),
    repo: InMemoryStudentRepository = Depends(get_student_repo),
):
    rows = repo.search(StudentCriteria.from_term(query), match_any=(match == "any"))
    return SearchResp(message="Search completed successfully", query=query, count=len(rows), students=_out(rows))


# ids are taken as text: a non-numeric id is a 404, not a 422
@router.get("/{student_id}", response_model=StudentResp)
def get_student(student_id: str, repo: InMemoryStudentRepository = Depends(get_student_repo)):
    row = repo.find_by_id(student_id)
    if row is None:
        raise _not_found("Student not found", student_id)
    return StudentResp(message="Student retrieved successfully", student=StudentOut.model_validate(row))


@router.post("", response_model=StudentResp, status_code=status.HTTP_201_CREATED)
def create_student(payload: StudentCreate, repo: InMemoryStudentRepository = Depends(get_student_repo)):
    try:
        row = repo.create(payload.model_dump())
    except DuplicateEmailError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "Student creation failed", "message": e.detail},
        )
    return StudentResp(message="Student created successfully", student=StudentOut.model_validate(row))


@router.put("/{student_id}", response_model=StudentResp)
def update_student(
    student_id: str,
    payload: StudentUpdate,
    repo: InMemoryStudentRepository = Depends(get_student_repo),
):
    try:
        row = repo.update(student_id, payload.changes())
    except StudentNotFoundError:
        raise _not_found("Update failed", student_id)
    except DuplicateEmailError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "Update failed", "message": e.detail},
        )
    return StudentResp(message="Student updated successfully", student=StudentOut.model_validate(row))


@router.delete("/{student_id}", response_model=StudentResp)
def delete_student(student_id: str, repo: InMemoryStudentRepository = Depends(get_student_repo)):
    try:
        row = repo.delete(student_id)
    except StudentNotFoundError:
        raise _not_found("Delete failed", student_id)
    return StudentResp(message="Student deleted successfully", student=StudentOut.model_validate(row))
