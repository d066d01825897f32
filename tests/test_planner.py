import pytest

from api_playground.jsonapi_filters import Predicate, plan_filters
from api_playground.jsonapi_formatting import (
    build_list_meta,
    build_show_meta,
    plan_pagination,
    plan_query,
    total_pages,
)
from api_playground.model_config import FilterType, PaginationConfig
from api_playground.registry import PlaygroundRegistry
from api_playground.request import parse_jsonapi_args
from api_playground.util import to_int

FILTERS = [{"field": "title", "type": "partial"}, {"field": "author_id", "type": "exact"}]


def _config(**options):
    return PlaygroundRegistry().register("recipe", attributes=["title", "body"], **options)


def test_parse_jsonapi_args() -> None:
    args = {"filters[title]": "soup", "page[number]": "2", "page[size]": "10", "sort": "title", "filters[a][b]": "x"}
    filters, page = parse_jsonapi_args(args)
    assert filters == {"title": "soup"}
    assert page == {"number": "2", "size": "10"}


def test_plan_filters_keeps_configured_order() -> None:
    config = _config(filters=FILTERS)
    predicates = plan_filters({"author_id": "1", "title": "Soup"}, config.filters)
    assert predicates == (Predicate("title", FilterType.PARTIAL, "Soup"), Predicate("author_id", FilterType.EXACT, "1"))


def test_plan_filters_ignores_unconfigured_fields() -> None:
    config = _config(filters=FILTERS)
    assert plan_filters({"body": "eggs"}, config.filters) == ()
    assert plan_filters({}, config.filters) == ()


@pytest.mark.parametrize(
    "value, expected",
    [("2", 2), ("2abc", 2), ("abc", 0), (None, 0), (" 7", 7), ("-3", -3), (4.0, 4), (True, 1)],
)
def test_to_int(value, expected) -> None:
    assert to_int(value) == expected


@pytest.mark.parametrize(
    "raw_page, page_number, page_size",
    [
        ({}, 1, 15),
        ({"number": "2"}, 2, 15),
        ({"number": "0"}, 1, 15),
        ({"number": "-4"}, 1, 15),
        ({"number": "abc"}, 1, 15),
        ({"number": "2abc", "size": "10"}, 2, 10),
        ({"size": "0"}, 1, 1),
        ({"size": "-1"}, 1, 1),
        ({"size": "100"}, 1, 50),
        ({"size": "abc"}, 1, 1),
    ],
)
def test_plan_pagination(raw_page, page_number, page_size) -> None:
    plan = plan_pagination(raw_page, PaginationConfig())
    assert plan.page_number == page_number
    assert plan.page_size == page_size
    assert plan.limit == page_size
    assert plan.offset == (page_number - 1) * page_size


def test_plan_pagination_uses_configured_page_size() -> None:
    plan = plan_pagination({"number": "3"}, PaginationConfig(page_size=2))
    assert (plan.page_size, plan.offset) == (2, 4)


def test_plan_query_without_pagination() -> None:
    config = _config(pagination={"enabled": False})
    plan = plan_query({"title": "soup"}, {"number": "2"}, config)
    assert plan.page is None
    assert plan.predicates == ()


@pytest.mark.parametrize("count, size, expected", [(0, 15, 0), (5, 2, 3), (4, 2, 2), (1, 50, 1)])
def test_total_pages(count, size, expected) -> None:
    assert total_pages(count, size) == expected


def test_list_meta() -> None:
    config = _config(filters=FILTERS, pagination={"page_size": 2})
    plan = plan_query({}, {}, config)
    meta = build_list_meta(config, ["recipe"], plan, 5)
    assert meta == {
        "available_attributes": {"ungrouped": ["title", "body"]},
        "available_filters": FILTERS,
        "available_models": ["recipe"],
        "total_count": 5,
        "pagination": {"current_page": 1, "page_size": 2, "total_pages": 3},
    }


def test_list_meta_without_total_count() -> None:
    config = _config(pagination={"total_count": False})
    meta = build_list_meta(config, ["recipe"], plan_query({}, {}, config), None)
    assert "total_count" not in meta
    assert meta["pagination"] == {"current_page": 1, "page_size": 15}


def test_list_meta_without_pagination() -> None:
    config = _config(pagination={"enabled": False, "total_count": False})
    meta = build_list_meta(config, ["recipe"], plan_query({}, {}, config), None)
    assert "pagination" not in meta
    assert "total_count" not in meta


def test_show_meta() -> None:
    assert build_show_meta(_config(), ["recipe", "author"]) == {
        "available_attributes": {"ungrouped": ["title", "body"]},
        "available_models": ["recipe", "author"],
    }
