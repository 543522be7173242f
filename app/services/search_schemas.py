"""Searchable field declarations for each academy entity.

Every entity lists the text fields the general term is matched against
(``searchable=True``), its specific filters, and the fields callers may sort by.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import func, or_

from app.models.academy import AcademyClass, ClassFormat, ClassLevel, Exercise, Material, Professor, Student
from app.services.search_contract import EntitySchema, FieldSpec, SearchValidationError

MATERIAL_EXTENSIONS: dict[str, tuple[str, ...]] = {
    "document": (".pdf", ".doc", ".docx", ".txt", ".rtf", ".md"),
    "image": (".jpg", ".jpeg", ".png", ".gif", ".bmp", ".svg"),
    "video": (".mp4", ".avi", ".mov", ".wmv", ".flv", ".webm"),
}

EXERCISE_STATUSES = frozenset({"active", "expired", "future"})


def _professor_teaches(class_id: int):
    return Professor.classes.any(AcademyClass.id == class_id)


def _professor_has_no_classes(flag: bool):
    if flag:
        return ~Professor.classes.any()
    return Professor.classes.any()


def _material_of_type(material_type: str):
    url = func.lower(Material.url)
    return or_(*[url.like(f"%{extension}") for extension in MATERIAL_EXTENSIONS[material_type]])


def _material_in_class(class_id: int):
    return Material.classes.any(AcademyClass.id == class_id)


def _exercise_status(status: str):
    now = datetime.now(UTC)
    if status == "active":
        return (Exercise.start_date <= now) & (Exercise.end_date >= now)
    if status == "expired":
        return Exercise.end_date < now
    if status == "future":
        return Exercise.start_date > now
    raise SearchValidationError("status", f"Invalid option '{status}'.")


STUDENT_SEARCH = EntitySchema(
    name="students",
    model=Student,
    fields={
        "id": FieldSpec("id", sortable=True),
        "first_name": FieldSpec("string", searchable=True, sortable=True),
        "last_name": FieldSpec("string", searchable=True, sortable=True),
        "dni": FieldSpec("string", searchable=True),
        "email": FieldSpec("string", searchable=True, sortable=True),
        "username": FieldSpec("string", searchable=True, sortable=True),
        "enrolled": FieldSpec("boolean"),
        "enrolled_at": FieldSpec("datetime", sortable=True, range=True),
    },
)

PROFESSOR_SEARCH = EntitySchema(
    name="professors",
    model=Professor,
    fields={
        "id": FieldSpec("id", sortable=True),
        "first_name": FieldSpec("string", searchable=True, sortable=True),
        "last_name": FieldSpec("string", searchable=True, sortable=True),
        "email": FieldSpec("string", searchable=True, sortable=True),
        "username": FieldSpec("string", searchable=True, sortable=True),
        "dni": FieldSpec("string", searchable=True),
        "enabled": FieldSpec("boolean"),
        "class_id": FieldSpec("id", predicate=_professor_teaches),
        "has_no_classes": FieldSpec("boolean", predicate=_professor_has_no_classes),
    },
)

CLASS_SEARCH = EntitySchema(
    name="classes",
    model=AcademyClass,
    fields={
        "id": FieldSpec("id", sortable=True),
        "title": FieldSpec("string", searchable=True, sortable=True),
        "description": FieldSpec("string", searchable=True),
        "format": FieldSpec("select", sortable=True, options=frozenset(item.value for item in ClassFormat)),
        "level": FieldSpec("select", sortable=True, options=frozenset(item.value for item in ClassLevel)),
        "price": FieldSpec("number", sortable=True, range=True),
    },
)

MATERIAL_SEARCH = EntitySchema(
    name="materials",
    model=Material,
    fields={
        "id": FieldSpec("id", sortable=True),
        "name": FieldSpec("string", searchable=True, sortable=True),
        "url": FieldSpec("string", searchable=True, sortable=True),
        "type": FieldSpec("select", options=frozenset(MATERIAL_EXTENSIONS), predicate=_material_of_type),
        "class_id": FieldSpec("id", predicate=_material_in_class),
    },
)

EXERCISE_SEARCH = EntitySchema(
    name="exercises",
    model=Exercise,
    fields={
        "id": FieldSpec("id", sortable=True),
        "name": FieldSpec("string", searchable=True, sortable=True),
        "statement": FieldSpec("string", searchable=True),
        "class_id": FieldSpec("id"),
        "status": FieldSpec("select", options=EXERCISE_STATUSES, predicate=_exercise_status),
        "start_date": FieldSpec("datetime", sortable=True, range=True),
        "end_date": FieldSpec("datetime", sortable=True, range=True),
    },
)
