from __future__ import annotations

from sqlalchemy.orm import Session

from app.logging import get_logger
from app.models.academy import AcademyClass, Exercise, Material, Professor, Student
from app.schemas.academy import (
    AcademyClassCreate,
    AcademyClassUpdate,
    ExerciseCreate,
    ExerciseUpdate,
    MaterialCreate,
    MaterialUpdate,
    ProfessorCreate,
    ProfessorUpdate,
    StudentCreate,
    StudentUpdate,
)
from app.services.common import commit_or_409, get_or_404
from app.services.normalization_provider import NormalizationMode
from app.services.search_contract import FilterSpec
from app.services.search_engine import QueryComposer
from app.services.search_schemas import (
    CLASS_SEARCH,
    EXERCISE_SEARCH,
    MATERIAL_SEARCH,
    PROFESSOR_SEARCH,
    STUDENT_SEARCH,
)

logger = get_logger(__name__)

_PERSON_CONFLICT = "Username, email or DNI already registered"


def _apply_update(entity, payload) -> None:
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(entity, key, value)


class Students:
    schema = STUDENT_SEARCH

    @staticmethod
    def create(db: Session, payload: StudentCreate) -> Student:
        student = Student(**payload.model_dump())
        db.add(student)
        commit_or_409(db, _PERSON_CONFLICT)
        db.refresh(student)
        return student

    @staticmethod
    def get(db: Session, student_id: int) -> Student:
        return get_or_404(db, Student, student_id)

    @staticmethod
    def update(db: Session, student_id: int, payload: StudentUpdate) -> Student:
        student = get_or_404(db, Student, student_id)
        _apply_update(student, payload)
        commit_or_409(db, _PERSON_CONFLICT)
        db.refresh(student)
        return student

    @staticmethod
    def delete(db: Session, student_id: int) -> None:
        student = get_or_404(db, Student, student_id)
        db.delete(student)
        db.commit()

    @classmethod
    def search(cls, db: Session, spec: FilterSpec, mode: NormalizationMode = NormalizationMode.native) -> dict:
        return QueryComposer(db, cls.schema, mode).search(spec)


class Professors:
    schema = PROFESSOR_SEARCH

    @staticmethod
    def create(db: Session, payload: ProfessorCreate) -> Professor:
        professor = Professor(**payload.model_dump())
        db.add(professor)
        commit_or_409(db, _PERSON_CONFLICT)
        db.refresh(professor)
        return professor

    @staticmethod
    def get(db: Session, professor_id: int) -> Professor:
        return get_or_404(db, Professor, professor_id)

    @staticmethod
    def update(db: Session, professor_id: int, payload: ProfessorUpdate) -> Professor:
        professor = get_or_404(db, Professor, professor_id)
        _apply_update(professor, payload)
        commit_or_409(db, _PERSON_CONFLICT)
        db.refresh(professor)
        return professor

    @staticmethod
    def delete(db: Session, professor_id: int) -> None:
        professor = get_or_404(db, Professor, professor_id)
        db.delete(professor)
        db.commit()

    @staticmethod
    def assign_class(db: Session, professor_id: int, class_id: int) -> Professor:
        professor = get_or_404(db, Professor, professor_id)
        academy_class = get_or_404(db, AcademyClass, class_id, label="Class")
        if academy_class not in professor.classes:
            professor.classes.append(academy_class)
            db.commit()
            logger.info("Assigned class %s to professor %s", class_id, professor_id)
        db.refresh(professor)
        return professor

    @staticmethod
    def unassign_class(db: Session, professor_id: int, class_id: int) -> Professor:
        professor = get_or_404(db, Professor, professor_id)
        academy_class = get_or_404(db, AcademyClass, class_id, label="Class")
        if academy_class in professor.classes:
            professor.classes.remove(academy_class)
            db.commit()
            logger.info("Removed class %s from professor %s", class_id, professor_id)
        db.refresh(professor)
        return professor

    @classmethod
    def search(cls, db: Session, spec: FilterSpec, mode: NormalizationMode = NormalizationMode.native) -> dict:
        return QueryComposer(db, cls.schema, mode).search(spec)


class AcademyClasses:
    schema = CLASS_SEARCH

    @staticmethod
    def create(db: Session, payload: AcademyClassCreate) -> AcademyClass:
        academy_class = AcademyClass(**payload.model_dump())
        db.add(academy_class)
        db.commit()
        db.refresh(academy_class)
        return academy_class

    @staticmethod
    def get(db: Session, class_id: int) -> AcademyClass:
        return get_or_404(db, AcademyClass, class_id, label="Class")

    @staticmethod
    def update(db: Session, class_id: int, payload: AcademyClassUpdate) -> AcademyClass:
        academy_class = get_or_404(db, AcademyClass, class_id, label="Class")
        _apply_update(academy_class, payload)
        db.commit()
        db.refresh(academy_class)
        return academy_class

    @staticmethod
    def delete(db: Session, class_id: int) -> None:
        academy_class = get_or_404(db, AcademyClass, class_id, label="Class")
        db.delete(academy_class)
        db.commit()

    @staticmethod
    def attach_material(db: Session, class_id: int, material_id: int) -> AcademyClass:
        academy_class = get_or_404(db, AcademyClass, class_id, label="Class")
        material = get_or_404(db, Material, material_id)
        if material not in academy_class.materials:
            academy_class.materials.append(material)
            db.commit()
        db.refresh(academy_class)
        return academy_class

    @classmethod
    def search(cls, db: Session, spec: FilterSpec, mode: NormalizationMode = NormalizationMode.native) -> dict:
        return QueryComposer(db, cls.schema, mode).search(spec)


class Materials:
    schema = MATERIAL_SEARCH

    @staticmethod
    def create(db: Session, payload: MaterialCreate) -> Material:
        material = Material(**payload.model_dump())
        db.add(material)
        db.commit()
        db.refresh(material)
        return material

    @staticmethod
    def get(db: Session, material_id: int) -> Material:
        return get_or_404(db, Material, material_id)

    @staticmethod
    def update(db: Session, material_id: int, payload: MaterialUpdate) -> Material:
        material = get_or_404(db, Material, material_id)
        _apply_update(material, payload)
        db.commit()
        db.refresh(material)
        return material

    @staticmethod
    def delete(db: Session, material_id: int) -> None:
        material = get_or_404(db, Material, material_id)
        db.delete(material)
        db.commit()

    @classmethod
    def search(cls, db: Session, spec: FilterSpec, mode: NormalizationMode = NormalizationMode.native) -> dict:
        return QueryComposer(db, cls.schema, mode).search(spec)


class Exercises:
    schema = EXERCISE_SEARCH

    @staticmethod
    def create(db: Session, payload: ExerciseCreate) -> Exercise:
        if payload.class_id is not None:
            get_or_404(db, AcademyClass, payload.class_id, label="Class")
        exercise = Exercise(**payload.model_dump())
        db.add(exercise)
        db.commit()
        db.refresh(exercise)
        return exercise

    @staticmethod
    def get(db: Session, exercise_id: int) -> Exercise:
        return get_or_404(db, Exercise, exercise_id)

    @staticmethod
    def update(db: Session, exercise_id: int, payload: ExerciseUpdate) -> Exercise:
        exercise = get_or_404(db, Exercise, exercise_id)
        data = payload.model_dump(exclude_unset=True)
        if data.get("class_id") is not None:
            get_or_404(db, AcademyClass, data["class_id"], label="Class")
        for key, value in data.items():
            setattr(exercise, key, value)
        db.commit()
        db.refresh(exercise)
        return exercise

    @staticmethod
    def delete(db: Session, exercise_id: int) -> None:
        exercise = get_or_404(db, Exercise, exercise_id)
        db.delete(exercise)
        db.commit()

    @classmethod
    def search(cls, db: Session, spec: FilterSpec, mode: NormalizationMode = NormalizationMode.native) -> dict:
        return QueryComposer(db, cls.schema, mode).search(spec)


students = Students()
professors = Professors()
academy_classes = AcademyClasses()
materials = Materials()
exercises = Exercises()
