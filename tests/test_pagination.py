import pytest

from socialnet.utils.pagination import PageRequest, Pagination


@pytest.mark.parametrize(
    "page, total, expected_pages, has_next, has_prev",
    [
        (1, 25, 3, True, False),
        (2, 25, 3, True, True),
        (3, 25, 3, False, True),
        (1, 10, 1, False, False),
        (1, 0, 0, False, False),
        (4, 25, 3, False, True),
    ],
)
def test_pagination_build(page, total, expected_pages, has_next, has_prev):
    meta = Pagination.build(PageRequest(page=page, limit=10), total)
    assert meta.current_page == page
    assert meta.total_pages == expected_pages
    assert meta.total_count == total
    assert meta.has_next is has_next
    assert meta.has_prev is has_prev


def test_page_request_offset():
    assert PageRequest().offset == 0
    assert PageRequest(page=3, limit=10).offset == 20
    assert PageRequest(page=2, limit=50).offset == 50
