import pytest

from app.schemas.academy import StudentRead
from app.schemas.common import PagedResult
from app.services.response import paged_response, total_pages
from app.services.search_contract import FilterSpec
from app.services.search_schemas import STUDENT_SEARCH


@pytest.mark.parametrize(
    ("total", "size", "expected"),
    [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (23, 10, 3), (100, 100, 1)],
)
def test_total_pages(total, size, expected):
    assert total_pages(total, size) == expected


def test_out_of_range_page_keeps_totals():
    spec = FilterSpec.build(STUDENT_SEARCH, page=3, size=10)

    envelope = paged_response([], spec, 23)

    assert envelope["content"] == []
    assert envelope["total_elements"] == 23
    assert envelope["total_pages"] == 3
    assert envelope["last"] is True
    assert envelope["first"] is False
    assert envelope["has_content"] is False


def test_empty_result_is_first_and_last():
    envelope = paged_response([], FilterSpec.build(STUDENT_SEARCH), 0)

    assert envelope["total_pages"] == 0
    assert envelope["first"] is True
    assert envelope["last"] is True


def test_envelope_echoes_sorting():
    spec = FilterSpec.build(STUDENT_SEARCH, sort_by="email", sort_direction="desc", size=5)

    envelope = paged_response(["a", "b"], spec, 12)

    assert envelope["sort_by"] == "email"
    assert envelope["sort_direction"] == "desc"
    assert envelope["size"] == 5
    assert envelope["has_content"] is True
    assert envelope["last"] is False


def test_paged_result_validates_envelope():
    spec = FilterSpec.build(STUDENT_SEARCH, size=1)
    student = {
        "id": 1,
        "username": "angel",
        "first_name": "Ángel",
        "last_name": "García",
        "dni": "X1",
        "email": "angel@example.com",
        "enrolled": True,
        "enrolled_at": "2026-01-01T00:00:00Z",
        "created_at": "2026-01-01T00:00:00Z",
    }

    result = PagedResult[StudentRead].model_validate(paged_response([student], spec, 2))

    assert result.content[0].last_name == "García"
    assert result.total_pages == 2
    assert not result.last
