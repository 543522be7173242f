from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_normalization_mode
from app.schemas.academy import ExerciseCreate, ExerciseRead, ExerciseUpdate
from app.schemas.common import PagedResult, SearchErrorResponse
from app.services.academy import exercises
from app.services.normalization_provider import NormalizationMode
from app.services.search_contract import FilterSpec

router = APIRouter(prefix="/exercises", tags=["exercises"])


@router.post("", response_model=ExerciseRead, status_code=status.HTTP_201_CREATED)
def create_exercise(payload: ExerciseCreate, db: Session = Depends(get_db)):
    return exercises.create(db, payload)


@router.get("", response_model=PagedResult[ExerciseRead], responses={400: {"model": SearchErrorResponse}})
def search_exercises(
    request: Request,
    db: Session = Depends(get_db),
    mode: NormalizationMode = Depends(get_normalization_mode),
):
    spec = FilterSpec.from_query_params(exercises.schema, request.query_params)
    return exercises.search(db, spec, mode)


@router.get("/{exercise_id}", response_model=ExerciseRead)
def get_exercise(exercise_id: int, db: Session = Depends(get_db)):
    return exercises.get(db, exercise_id)


@router.patch("/{exercise_id}", response_model=ExerciseRead)
def update_exercise(exercise_id: int, payload: ExerciseUpdate, db: Session = Depends(get_db)):
    return exercises.update(db, exercise_id, payload)


@router.delete("/{exercise_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_exercise(exercise_id: int, db: Session = Depends(get_db)):
    exercises.delete(db, exercise_id)
