from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_normalization_mode
from app.schemas.academy import AcademyClassCreate, AcademyClassRead, AcademyClassUpdate
from app.schemas.common import PagedResult, SearchErrorResponse
from app.services.academy import academy_classes
from app.services.normalization_provider import NormalizationMode
from app.services.search_contract import FilterSpec

router = APIRouter(prefix="/classes", tags=["classes"])


@router.post("", response_model=AcademyClassRead, status_code=status.HTTP_201_CREATED)
def create_class(payload: AcademyClassCreate, db: Session = Depends(get_db)):
    return academy_classes.create(db, payload)


@router.get("", response_model=PagedResult[AcademyClassRead], responses={400: {"model": SearchErrorResponse}})
def search_classes(
    request: Request,
    db: Session = Depends(get_db),
    mode: NormalizationMode = Depends(get_normalization_mode),
):
    spec = FilterSpec.from_query_params(academy_classes.schema, request.query_params)
    return academy_classes.search(db, spec, mode)


@router.get("/{class_id}", response_model=AcademyClassRead)
def get_class(class_id: int, db: Session = Depends(get_db)):
    return academy_classes.get(db, class_id)


@router.patch("/{class_id}", response_model=AcademyClassRead)
def update_class(class_id: int, payload: AcademyClassUpdate, db: Session = Depends(get_db)):
    return academy_classes.update(db, class_id, payload)


@router.delete("/{class_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_class(class_id: int, db: Session = Depends(get_db)):
    academy_classes.delete(db, class_id)


@router.put("/{class_id}/materials/{material_id}", response_model=AcademyClassRead)
def attach_material(class_id: int, material_id: int, db: Session = Depends(get_db)):
    return academy_classes.attach_material(db, class_id, material_id)
