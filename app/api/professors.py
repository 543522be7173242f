from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_normalization_mode
from app.schemas.academy import ProfessorCreate, ProfessorRead, ProfessorUpdate
from app.schemas.common import PagedResult, SearchErrorResponse
from app.services.academy import professors
from app.services.normalization_provider import NormalizationMode
from app.services.search_contract import FilterSpec

router = APIRouter(prefix="/professors", tags=["professors"])


@router.post("", response_model=ProfessorRead, status_code=status.HTTP_201_CREATED)
def create_professor(payload: ProfessorCreate, db: Session = Depends(get_db)):
    return professors.create(db, payload)


@router.get("", response_model=PagedResult[ProfessorRead], responses={400: {"model": SearchErrorResponse}})
def search_professors(
    request: Request,
    db: Session = Depends(get_db),
    mode: NormalizationMode = Depends(get_normalization_mode),
):
    spec = FilterSpec.from_query_params(professors.schema, request.query_params)
    return professors.search(db, spec, mode)


@router.get("/{professor_id}", response_model=ProfessorRead)
def get_professor(professor_id: int, db: Session = Depends(get_db)):
    return professors.get(db, professor_id)


@router.patch("/{professor_id}", response_model=ProfessorRead)
def update_professor(professor_id: int, payload: ProfessorUpdate, db: Session = Depends(get_db)):
    return professors.update(db, professor_id, payload)


@router.delete("/{professor_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_professor(professor_id: int, db: Session = Depends(get_db)):
    professors.delete(db, professor_id)


# ── Class assignment ─────────────────────────────────────────────


@router.put("/{professor_id}/classes/{class_id}", response_model=ProfessorRead)
def assign_class(professor_id: int, class_id: int, db: Session = Depends(get_db)):
    return professors.assign_class(db, professor_id, class_id)


@router.delete("/{professor_id}/classes/{class_id}", response_model=ProfessorRead)
def unassign_class(professor_id: int, class_id: int, db: Session = Depends(get_db)):
    return professors.unassign_class(db, professor_id, class_id)
