from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from app.models.academy import AcademyClass, ClassLevel, Exercise, Material, Professor, Student
from app.services.normalization_provider import NormalizationMode
from app.services.search_contract import FilterSpec, Range
from app.services.search_engine import QueryComposer, escape_like, search
from app.services.search_schemas import (
    CLASS_SEARCH,
    EXERCISE_SEARCH,
    MATERIAL_SEARCH,
    PROFESSOR_SEARCH,
    STUDENT_SEARCH,
)


def _person_fields(first_name: str, last_name: str) -> dict:
    token = uuid.uuid4().hex[:10]
    return {
        "first_name": first_name,
        "last_name": last_name,
        "username": f"user-{token}",
        "dni": token,
        "email": f"{token}@example.com",
    }


def _create_student(db_session, first_name: str, last_name: str, **overrides) -> Student:
    student = Student(**(_person_fields(first_name, last_name) | overrides))
    db_session.add(student)
    db_session.commit()
    db_session.refresh(student)
    return student


def _create_professor(db_session, first_name: str, last_name: str, **overrides) -> Professor:
    professor = Professor(**(_person_fields(first_name, last_name) | overrides))
    db_session.add(professor)
    db_session.commit()
    db_session.refresh(professor)
    return professor


def _create_class(db_session, title: str, **overrides) -> AcademyClass:
    academy_class = AcademyClass(**({"title": title} | overrides))
    db_session.add(academy_class)
    db_session.commit()
    db_session.refresh(academy_class)
    return academy_class


def _ids(result: dict) -> list[int]:
    return [item.id for item in result["content"]]


@pytest.fixture()
def garcia_students(db_session):
    return [
        _create_student(db_session, "Ángel", "García", enrolled=True),
        _create_student(db_session, "Maria", "Garcia", enrolled=False),
        _create_student(db_session, "Luis", "Pérez", enrolled=True),
    ]


def test_general_term_matches_across_accents_and_case(db_session, normalization_mode, garcia_students):
    angel, maria, _luis = garcia_students
    spec = FilterSpec.build(STUDENT_SEARCH, general_term="garcia")

    result = QueryComposer(db_session, STUDENT_SEARCH, normalization_mode).search(spec)

    assert _ids(result) == [angel.id, maria.id]
    assert result["total_elements"] == 2


def test_specific_filter_narrows_general_term(db_session, normalization_mode, garcia_students):
    angel = garcia_students[0]
    spec = FilterSpec.build(STUDENT_SEARCH, general_term="garcia", filters={"enrolled": "true"})

    result = QueryComposer(db_session, STUDENT_SEARCH, normalization_mode).search(spec)

    assert _ids(result) == [angel.id]


def test_accented_term_matches_plain_values(db_session, normalization_mode, garcia_students):
    spec = FilterSpec.build(STUDENT_SEARCH, general_term="GARCÍA")

    result = search(db_session, spec, normalization_mode)

    assert result["total_elements"] == 2


def test_omitting_a_filter_never_shrinks_results(db_session, normalization_mode, garcia_students):
    composer = QueryComposer(db_session, STUDENT_SEARCH, normalization_mode)
    spec = FilterSpec.build(
        STUDENT_SEARCH,
        general_term="a",
        filters={"enrolled": "true", "last_name": "pérez"},
    )

    narrow = set(_ids(composer.search(spec)))
    for name in ("enrolled", "last_name"):
        assert narrow <= set(_ids(composer.search(spec.without(name))))


def test_general_term_is_or_across_searchable_fields(db_session, normalization_mode):
    by_name = _create_student(db_session, "Zoë", "Quintero")
    by_email = _create_student(db_session, "Ana", "Lopez", email="zoe.lopez@example.com")
    _create_student(db_session, "Ana", "Lopez")

    spec = FilterSpec.build(STUDENT_SEARCH, general_term="zoe")
    result = QueryComposer(db_session, STUDENT_SEARCH, normalization_mode).search(spec)

    assert _ids(result) == [by_name.id, by_email.id]


def test_specific_text_filters_are_anded(db_session, normalization_mode):
    match = _create_student(db_session, "José", "Núñez")
    _create_student(db_session, "José", "Ruiz")
    _create_student(db_session, "Pedro", "Núñez")

    spec = FilterSpec.build(STUDENT_SEARCH, filters={"first_name": "jose", "last_name": "NUNEZ"})
    result = QueryComposer(db_session, STUDENT_SEARCH, normalization_mode).search(spec)

    assert _ids(result) == [match.id]


def test_number_range_is_inclusive(db_session, normalization_mode):
    cheap = _create_class(db_session, "Intro", price=Decimal("10.00"))
    mid = _create_class(db_session, "Core", price=Decimal("20.00"))
    pricey = _create_class(db_session, "Advanced", price=Decimal("30.00"))
    composer = QueryComposer(db_session, CLASS_SEARCH, normalization_mode)

    closed = composer.search(FilterSpec.build(CLASS_SEARCH, filters={"price": Range("20", "30")}))
    lower_only = composer.search(FilterSpec.build(CLASS_SEARCH, filters={"price": Range("15", None)}))
    upper_only = composer.search(FilterSpec.build(CLASS_SEARCH, filters={"price": Range(None, "10")}))

    assert _ids(closed) == [mid.id, pricey.id]
    assert _ids(lower_only) == [mid.id, pricey.id]
    assert _ids(upper_only) == [cheap.id]


def test_select_filter_matches_enum_column(db_session, normalization_mode):
    _create_class(db_session, "Basics", level=ClassLevel.beginner)
    expert = _create_class(db_session, "Compilers", level=ClassLevel.advanced)

    spec = FilterSpec.build(CLASS_SEARCH, filters={"level": "ADVANCED"})
    result = QueryComposer(db_session, CLASS_SEARCH, normalization_mode).search(spec)

    assert _ids(result) == [expert.id]


def test_sort_desc_uses_id_as_tie_breaker(db_session, normalization_mode):
    alpha = _create_student(db_session, "A", "Alpha")
    beta_one = _create_student(db_session, "B", "Beta")
    beta_two = _create_student(db_session, "C", "Beta")
    gamma = _create_student(db_session, "D", "Gamma")

    spec = FilterSpec.build(STUDENT_SEARCH, sort_by="last_name", sort_direction="desc")
    result = QueryComposer(db_session, STUDENT_SEARCH, normalization_mode).search(spec)

    assert _ids(result) == [gamma.id, beta_one.id, beta_two.id, alpha.id]
    assert result["sort_by"] == "last_name"
    assert result["sort_direction"] == "desc"


def test_pagination_arithmetic(db_session, normalization_mode):
    created = [_create_student(db_session, f"Student{index:02d}", "Paged") for index in range(23)]
    composer = QueryComposer(db_session, STUDENT_SEARCH, normalization_mode)

    pages = [composer.search(FilterSpec.build(STUDENT_SEARCH, page=page, size=10)) for page in range(4)]

    assert [len(page["content"]) for page in pages] == [10, 10, 3, 0]
    assert all(page["total_elements"] == 23 for page in pages)
    assert all(page["total_pages"] == 3 for page in pages)
    assert pages[0]["first"] and not pages[0]["last"]
    assert pages[2]["last"]
    assert not pages[3]["has_content"]
    assert [item.id for page in pages for item in page["content"]] == [student.id for student in created]


def test_unavailable_mode_is_case_insensitive_only(db_session, garcia_students):
    maria = garcia_students[1]
    spec = FilterSpec.build(STUDENT_SEARCH, general_term="GARCIA")

    result = QueryComposer(db_session, STUDENT_SEARCH, NormalizationMode.unavailable).search(spec)

    assert _ids(result) == [maria.id]


def test_like_metacharacters_match_literally(db_session, normalization_mode):
    percent = _create_class(db_session, "100% Python")
    _create_class(db_session, "1000 Python")
    underscore = _create_class(db_session, "snake_case basics")
    _create_class(db_session, "snakeXcase basics")
    composer = QueryComposer(db_session, CLASS_SEARCH, normalization_mode)

    assert _ids(composer.search(FilterSpec.build(CLASS_SEARCH, general_term="100%"))) == [percent.id]
    assert _ids(composer.search(FilterSpec.build(CLASS_SEARCH, general_term="snake_"))) == [underscore.id]


def test_escape_like_escapes_escape_character():
    assert escape_like("a/b%c_d") == "a//b/%c/_d"


def test_professor_class_membership_filters(db_session, normalization_mode):
    academy_class = _create_class(db_session, "Algebra")
    teaching = _create_professor(db_session, "Carmen", "Díaz")
    idle = _create_professor(db_session, "Tomás", "Vega")
    teaching.classes.append(academy_class)
    db_session.commit()
    composer = QueryComposer(db_session, PROFESSOR_SEARCH, normalization_mode)

    by_class = composer.search(FilterSpec.build(PROFESSOR_SEARCH, filters={"class_id": academy_class.id}))
    without_classes = composer.search(FilterSpec.build(PROFESSOR_SEARCH, filters={"has_no_classes": "true"}))
    with_classes = composer.search(FilterSpec.build(PROFESSOR_SEARCH, filters={"has_no_classes": "false"}))

    assert _ids(by_class) == [teaching.id]
    assert _ids(without_classes) == [idle.id]
    assert _ids(with_classes) == [teaching.id]


def test_material_type_and_class_filters(db_session, normalization_mode):
    document = Material(name="Syllabus", url="https://cdn.example.com/syllabus.PDF")
    image = Material(name="Diagram", url="https://cdn.example.com/diagram.png")
    video = Material(name="Lecture", url="https://cdn.example.com/lecture.mp4")
    db_session.add_all([document, image, video])
    academy_class = _create_class(db_session, "Geometry")
    academy_class.materials.append(image)
    db_session.commit()
    composer = QueryComposer(db_session, MATERIAL_SEARCH, normalization_mode)

    documents = composer.search(FilterSpec.build(MATERIAL_SEARCH, filters={"type": "document"}))
    videos = composer.search(FilterSpec.build(MATERIAL_SEARCH, filters={"type": "VIDEO"}))
    in_class = composer.search(FilterSpec.build(MATERIAL_SEARCH, filters={"class_id": academy_class.id}))

    assert _ids(documents) == [document.id]
    assert _ids(videos) == [video.id]
    assert _ids(in_class) == [image.id]


def test_exercise_status_and_class_filters(db_session, normalization_mode):
    academy_class = _create_class(db_session, "Statistics")
    now = datetime.now(UTC)
    active = Exercise(
        name="Sampling",
        statement="Draw a sample",
        start_date=now - timedelta(days=1),
        end_date=now + timedelta(days=1),
        class_id=academy_class.id,
    )
    expired = Exercise(
        name="Means",
        statement="Compute the mean",
        start_date=now - timedelta(days=10),
        end_date=now - timedelta(days=5),
        class_id=academy_class.id,
    )
    future = Exercise(
        name="Regression",
        statement="Fit a line",
        start_date=now + timedelta(days=5),
        end_date=now + timedelta(days=10),
    )
    db_session.add_all([active, expired, future])
    db_session.commit()
    composer = QueryComposer(db_session, EXERCISE_SEARCH, normalization_mode)

    def _status(value):
        return _ids(composer.search(FilterSpec.build(EXERCISE_SEARCH, filters={"status": value})))

    assert _status("active") == [active.id]
    assert _status("expired") == [expired.id]
    assert _status("future") == [future.id]
    in_class = composer.search(FilterSpec.build(EXERCISE_SEARCH, filters={"class_id": academy_class.id}))
    assert _ids(in_class) == [active.id, expired.id]


def test_composer_rejects_spec_for_another_entity(db_session, normalization_mode):
    spec = FilterSpec.build(CLASS_SEARCH)

    with pytest.raises(ValueError, match="bound to 'students'"):
        QueryComposer(db_session, STUDENT_SEARCH, normalization_mode).predicates(spec)


def test_no_filters_returns_everything(db_session, normalization_mode, garcia_students):
    result = QueryComposer(db_session, STUDENT_SEARCH, normalization_mode).search(FilterSpec.build(STUDENT_SEARCH))

    assert _ids(result) == [student.id for student in garcia_students]


def test_offset_datetime_bound_compares_in_utc(db_session, normalization_mode):
    morning = _create_student(db_session, "Early", "Riser", enrolled_at=datetime(2026, 1, 1, 10, tzinfo=UTC))
    _create_student(db_session, "Late", "Riser", enrolled_at=datetime(2026, 1, 1, 8, tzinfo=UTC))

    spec = FilterSpec.build(
        STUDENT_SEARCH,
        general_term="riser",
        filters={"enrolled_at": Range("2026-01-01T11:00:00+02:00", None)},
    )
    result = QueryComposer(db_session, STUDENT_SEARCH, normalization_mode).search(spec)

    assert _ids(result) == [morning.id]
