"""Model-level playground configuration.

This module contains the configuration objects created by
:meth:`~api_playground.registry.PlaygroundRegistry.register` and the functions
that normalize the declarative options into them.

The configuration objects are immutable: a declaration is normalized once, at
registration time, and shared by all requests afterwards.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import api_playground
from .errors import ConfigurationError
from .util import clamp, pluralize

UNGROUPED = "ungrouped"
OPERATIONS = ("create", "update", "delete")


class FilterType(str, enum.Enum):
    """Match type of a configured filter"""

    EXACT = "exact"
    PARTIAL = "partial"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class FilterConfig:
    field: str
    type: FilterType

    def to_dict(self) -> dict:
        return {"field": self.field, "type": self.type.value}


@dataclass(frozen=True)
class PaginationConfig:
    enabled: bool = True
    page_size: int = 15
    total_count: bool = True

    def to_dict(self) -> dict:
        return {"enabled": self.enabled, "page_size": self.page_size, "total_count": self.total_count}


@dataclass(frozen=True)
class ModelConfiguration:
    """Normalized declaration of a single playground model.

    ``repository`` is the storage accessor bound at registration time and
    ``accessors`` maps every exposed field name to the function that reads it
    from a record. Neither takes part in equality.
    """

    name: str
    attributes: Mapping[str, tuple] = field(default_factory=lambda: {UNGROUPED: ()})
    relationships: tuple = ()
    requests: Mapping[str, Any] = field(default_factory=dict)
    filters: tuple = ()
    pagination: PaginationConfig = field(default_factory=PaginationConfig)
    repository: Any = field(default=None, compare=False, repr=False)
    accessors: Mapping[str, Callable] = field(default_factory=dict, compare=False, repr=False)

    @property
    def type(self) -> str:
        """
        :return: the JSON:API resource type, i.e. the pluralized model name
        """
        return pluralize(self.name)

    @property
    def field_names(self) -> list:
        """
        :return: all exposed attribute names, in declaration order
        """
        return [attr for fields in self.attributes.values() for attr in fields]

    def allows(self, operation: str) -> bool:
        """
        :param operation: one of "create", "update", "delete"
        :return: whether the operation is enabled for this model
        """
        return bool(self.requests.get(operation, False))

    def allowed_fields(self, operation: str) -> list:
        """
        :param operation: "create" or "update"
        :return: the attribute names that may be written by the operation
        """
        spec = self.requests.get(operation, False)
        if spec is True:
            return self.field_names
        if isinstance(spec, Mapping):
            return list(spec.get("fields", ()))
        return []

    def available_attributes(self) -> dict:
        return {group: list(fields) for group, fields in self.attributes.items()}

    def available_filters(self) -> list:
        return [filter_config.to_dict() for filter_config in self.filters]


def normalize_attributes(attributes: Any) -> dict:
    """
    Normalize the attributes declaration:
        ["title", {"timestamps": ["created_at", "updated_at"]}]
    =>
        {"ungrouped": ("title",), "timestamps": ("created_at", "updated_at")}

    A field can only be part of one group, duplicates keep their first group
    """
    result = {UNGROUPED: []}
    if attributes is None:
        return {UNGROUPED: ()}
    if isinstance(attributes, Mapping):
        attributes = [{group: fields} for group, fields in attributes.items()]
    elif isinstance(attributes, (str, bytes)):
        attributes = [attributes]

    seen = set()

    def add(group, attr_name):
        attr_name = str(attr_name)
        if attr_name in seen:
            api_playground.log.warning(f"Attribute {attr_name} is declared more than once, ignoring it in group {group}")
            return
        seen.add(attr_name)
        result.setdefault(group, []).append(attr_name)

    for attr in attributes:
        if isinstance(attr, Mapping):
            for group, fields in attr.items():
                group = str(group)
                result.setdefault(group, [])
                if isinstance(fields, (str, bytes)) or not hasattr(fields, "__iter__"):
                    fields = [fields]
                for attr_name in fields:
                    add(group, attr_name)
        else:
            add(UNGROUPED, attr)

    return {group: tuple(fields) for group, fields in result.items()}


def normalize_requests(requests: Optional[Mapping]) -> dict:
    """
    Normalize the requests declaration:
    - true/false values are kept
    - mappings are converted to {"fields": (...)}
    - missing operations are disabled
    """
    result = {operation: False for operation in OPERATIONS}
    if not requests:
        return result
    for key, value in requests.items():
        key = str(key)
        if key not in OPERATIONS:
            api_playground.log.warning(f"Unknown request type {key}")
        if value is True or value is False:
            result[key] = value
        elif isinstance(value, Mapping):
            spec = {str(k): v for k, v in value.items()}
            spec["fields"] = tuple(str(f) for f in (spec.get("fields") or ()))
            result[key] = spec
        else:
            result[key] = bool(value)
    if not isinstance(result.get("delete"), bool):
        result["delete"] = bool(result.get("delete"))
    return result


def normalize_filters(filters: Optional[list]) -> tuple:
    """
    Normalize the filters declaration: [{"field": "title", "type": "partial"}, ...]
    :raises ConfigurationError: in case of an unknown filter type
    """
    if not filters:
        return ()
    result = []
    for filter_spec in filters:
        if not isinstance(filter_spec, Mapping):
            raise ConfigurationError(f"Invalid filter declaration {filter_spec!r}")
        filter_field = str(filter_spec.get("field", ""))
        raw_type = filter_spec.get("type", FilterType.EXACT)
        try:
            filter_type = FilterType(str(getattr(raw_type, "value", raw_type)))
        except ValueError:
            raise ConfigurationError(f'Invalid filter type "{raw_type}" for field "{filter_field}"')
        result.append(FilterConfig(field=filter_field, type=filter_type))
    return tuple(result)


def normalize_pagination(pagination: Optional[Mapping]) -> PaginationConfig:
    """
    Normalize the pagination declaration, the page size is clamped to [MIN_PAGE_SIZE, MAX_PAGE_SIZE]
    """
    settings = api_playground.Playground
    config = pagination or {}
    try:
        page_size = int(config.get("page_size", settings.DEFAULT_PAGE_SIZE))
    except (TypeError, ValueError):
        api_playground.log.warning(f"Invalid page size {config.get('page_size')!r}, using the default")
        page_size = settings.DEFAULT_PAGE_SIZE

    return PaginationConfig(
        enabled=bool(config.get("enabled", True)),
        page_size=clamp(page_size, settings.MIN_PAGE_SIZE, settings.MAX_PAGE_SIZE),
        total_count=bool(config.get("total_count", True)),
    )


def normalize_relationships(relationships: Optional[list]) -> tuple:
    if not relationships:
        return ()
    if isinstance(relationships, (str, bytes)):
        relationships = [relationships]
    return tuple(str(rel) for rel in relationships)
