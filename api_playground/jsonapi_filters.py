"""
JSON:API filtering strategies

https://jsonapi.org/recommendations/#filtering
The playground only accepts `filters[<field>]=<value>` query parameters for configured filter fields,
other fields are ignored so clients can't probe arbitrary columns.
"""
from dataclasses import dataclass
from typing import Any, Iterable, Mapping
import api_playground
from .model_config import FilterConfig, FilterType


@dataclass(frozen=True)
class Predicate:
    """
    A single filter condition, all predicates of a query are combined with AND
    - exact: field == value
    - partial: case-insensitive substring match
    """

    field: str
    type: FilterType
    value: Any


def plan_filters(raw_filters: Mapping[str, Any], configured_filters: Iterable[FilterConfig]) -> tuple:
    """
    :param raw_filters: {field: value} dict parsed from the `filters[...]` query parameters
    :param configured_filters: FilterConfig instances of the model
    :return: tuple of predicates, in the order of the configured filters
    """
    if not raw_filters:
        return ()
    predicates = []
    configured_fields = set()
    for filter_config in configured_filters:
        configured_fields.add(filter_config.field)
        if filter_config.field not in raw_filters:
            continue
        predicates.append(Predicate(filter_config.field, filter_config.type, raw_filters[filter_config.field]))

    for field in raw_filters:
        if field not in configured_fields:
            api_playground.log.debug(f"Ignoring filter on unconfigured field '{field}'")
    return tuple(predicates)
