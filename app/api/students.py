from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_normalization_mode
from app.schemas.academy import StudentCreate, StudentRead, StudentUpdate
from app.schemas.common import PagedResult, SearchErrorResponse
from app.services.academy import students
from app.services.normalization_provider import NormalizationMode
from app.services.search_contract import FilterSpec

router = APIRouter(prefix="/students", tags=["students"])


@router.post("", response_model=StudentRead, status_code=status.HTTP_201_CREATED)
def create_student(payload: StudentCreate, db: Session = Depends(get_db)):
    return students.create(db, payload)


@router.get("", response_model=PagedResult[StudentRead], responses={400: {"model": SearchErrorResponse}})
def search_students(
    request: Request,
    db: Session = Depends(get_db),
    mode: NormalizationMode = Depends(get_normalization_mode),
):
    spec = FilterSpec.from_query_params(students.schema, request.query_params)
    return students.search(db, spec, mode)


@router.get("/{student_id}", response_model=StudentRead)
def get_student(student_id: int, db: Session = Depends(get_db)):
    return students.get(db, student_id)


@router.patch("/{student_id}", response_model=StudentRead)
def update_student(student_id: int, payload: StudentUpdate, db: Session = Depends(get_db)):
    return students.update(db, student_id, payload)


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_student(student_id: int, db: Session = Depends(get_db)):
    students.delete(db, student_id)
