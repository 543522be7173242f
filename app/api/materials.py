from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_normalization_mode
from app.schemas.academy import MaterialCreate, MaterialRead, MaterialUpdate
from app.schemas.common import PagedResult, SearchErrorResponse
from app.services.academy import materials
from app.services.normalization_provider import NormalizationMode
from app.services.search_contract import FilterSpec

router = APIRouter(prefix="/materials", tags=["materials"])


@router.post("", response_model=MaterialRead, status_code=status.HTTP_201_CREATED)
def create_material(payload: MaterialCreate, db: Session = Depends(get_db)):
    return materials.create(db, payload)


@router.get("", response_model=PagedResult[MaterialRead], responses={400: {"model": SearchErrorResponse}})
def search_materials(
    request: Request,
    db: Session = Depends(get_db),
    mode: NormalizationMode = Depends(get_normalization_mode),
):
    spec = FilterSpec.from_query_params(materials.schema, request.query_params)
    return materials.search(db, spec, mode)


@router.get("/{material_id}", response_model=MaterialRead)
def get_material(material_id: int, db: Session = Depends(get_db)):
    return materials.get(db, material_id)


@router.patch("/{material_id}", response_model=MaterialRead)
def update_material(material_id: int, payload: MaterialUpdate, db: Session = Depends(get_db)):
    return materials.update(db, material_id, payload)


@router.delete("/{material_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_material(material_id: int, db: Session = Depends(get_db)):
    materials.delete(db, material_id)
