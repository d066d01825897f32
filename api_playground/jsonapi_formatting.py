# JSON:API response formatting functions:
# - filtering (https://jsonapi.org/format/#fetching-filtering)
# - pagination (https://jsonapi.org/format/#fetching-pagination)
# - meta information of the list and show responses
#
# Response formatting follows filter -> count -> paginate
#
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional
import api_playground
from .jsonapi_filters import plan_filters
from .model_config import ModelConfiguration, PaginationConfig
from .util import clamp, to_int


@dataclass(frozen=True)
class PagePlan:
    page_number: int
    page_size: int
    offset: int
    limit: int


@dataclass(frozen=True)
class QueryPlan:
    """
    :param predicates: filter predicates
    :param page: None when pagination is disabled
    """

    predicates: tuple = ()
    page: Optional[PagePlan] = None


def plan_pagination(raw_page: Optional[Mapping[str, Any]], pagination: PaginationConfig) -> PagePlan:
    """
    :param raw_page: {"number": ..., "size": ...} dict parsed from the `page[...]` query parameters
    :param pagination: pagination configuration of the model
    :return: page plan, the page number is at least 1 and the page size within [MIN_PAGE_SIZE, MAX_PAGE_SIZE]
    """
    raw_page = raw_page or {}
    settings = api_playground.Playground
    page_number = max(to_int(raw_page.get("number", 1)), 1)
    if raw_page.get("size") is not None:
        page_size = clamp(to_int(raw_page["size"]), settings.MIN_PAGE_SIZE, settings.MAX_PAGE_SIZE)
    else:
        page_size = pagination.page_size
    return PagePlan(page_number=page_number, page_size=page_size, offset=(page_number - 1) * page_size, limit=page_size)


def plan_query(raw_filters: Optional[Mapping], raw_page: Optional[Mapping], config: ModelConfiguration) -> QueryPlan:
    """
    Combine the filter and pagination plans for a list request
    """
    predicates = plan_filters(raw_filters or {}, config.filters) if config.filters else ()
    page = plan_pagination(raw_page, config.pagination) if config.pagination.enabled else None
    return QueryPlan(predicates=predicates, page=page)


def total_pages(total_count: int, page_size: int) -> int:
    if not total_count:
        return 0
    return math.ceil(total_count / page_size)


def build_list_meta(config: ModelConfiguration, available_models: list, plan: QueryPlan, total_count: Optional[int]) -> dict:
    """
    :param total_count: count of the filtered collection, None if it wasn't computed
    :return: the meta member of a list response
    """
    meta = {
        "available_attributes": config.available_attributes(),
        "available_filters": config.available_filters(),
        "available_models": list(available_models),
    }
    if total_count is not None:
        meta["total_count"] = total_count
    if plan.page is not None:
        pagination = {"current_page": plan.page.page_number, "page_size": plan.page.page_size}
        if total_count is not None:
            pagination["total_pages"] = total_pages(total_count, plan.page.page_size)
        meta["pagination"] = pagination
    return meta


def build_show_meta(config: ModelConfiguration, available_models: list) -> dict:
    return {"available_attributes": config.available_attributes(), "available_models": list(available_models)}
