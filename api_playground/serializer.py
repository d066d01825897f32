#
# JSON:API resource serialization
#
# {
#     "id": "1",
#     "type": "recipes",
#     "attributes": {
#         "title": "Spaghetti Carbonara",
#         "timestamps": {"created_at": "2024-03-21T14:30:00", "updated_at": "2024-03-21T14:30:00"}
#     },
#     "relationships": {"author": {"data": {"id": "1", "type": "author"}}}
# }
#
import datetime
import operator
from collections.abc import Mapping
from typing import Any
import sqlalchemy
import api_playground
from .model_config import UNGROUPED, ModelConfiguration
from .repository import PK_DELIMITER


def record_id(record: Any) -> str:
    """
    :return: string form of the record primary key, composite keys are joined with "_"
    """
    state = sqlalchemy.inspect(record, raiseerr=False)
    identity = getattr(state, "identity", None) if state is not None else None
    if identity:
        return PK_DELIMITER.join(str(value) for value in identity)
    return str(getattr(record, "id", ""))


def format_attribute_value(value: Any) -> Any:
    """
    Timestamps and dates are rendered as ISO-8601 strings, UTC datetimes get a "Z" suffix
    """
    if isinstance(value, datetime.datetime):
        result = value.isoformat(timespec="seconds")
        if result.endswith("+00:00"):
            result = result[:-6] + "Z"
        return result
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return value


def is_collection(value: Any) -> bool:
    if isinstance(value, (str, bytes, Mapping)):
        return False
    return hasattr(value, "__iter__")


class AttributeReadError(Exception):
    pass


def read_field(record: Any, field: str, config: ModelConfiguration) -> Any:
    accessor = config.accessors.get(field) or operator.attrgetter(field)
    try:
        return accessor(record)
    except AttributeError as exc:
        raise AttributeReadError(f"Attribute '{field}' not found on {type(record).__name__}") from exc


def serialize_attributes(record: Any, config: ModelConfiguration) -> dict:
    """
    Ungrouped fields are emitted flat, the other groups are nested under the group name.
    Fields that can't be read are reported in an "_errors" list instead of failing the whole resource
    """
    result = {}
    errors = []
    for group, fields in config.attributes.items():
        if not fields:
            continue
        if group == UNGROUPED:
            for field in fields:
                try:
                    result[field] = format_attribute_value(read_field(record, field, config))
                except AttributeReadError as exc:
                    errors.append({"attribute": field, "message": str(exc)})
            continue

        group_values = {}
        for field in fields:
            try:
                group_values[field] = format_attribute_value(read_field(record, field, config))
            except AttributeReadError as exc:
                errors.append({"attribute": f"{group}.{field}", "message": str(exc)})
        if group_values:
            result[group] = group_values

    if errors:
        api_playground.log.debug(f"Serialization errors for {type(record).__name__}: {errors}")
        result["_errors"] = errors
    return result


def resource_identifier(related: Any, rel_name: str) -> dict:
    return {"id": record_id(related), "type": rel_name}


def serialize_relationships(record: Any, config: ModelConfiguration) -> dict:
    result = {}
    for rel_name in config.relationships:
        try:
            related = read_field(record, rel_name, config)
        except AttributeReadError as exc:
            api_playground.log.warning(str(exc))
            related = None
        if related is None:
            result[rel_name] = {"data": None}
        elif is_collection(related):
            result[rel_name] = {"data": [resource_identifier(item, rel_name) for item in related]}
        else:
            result[rel_name] = {"data": resource_identifier(related, rel_name)}
    return result


def serialize(record: Any, config: ModelConfiguration) -> dict:
    """
    :param record: storage record
    :param config: configuration of the model
    :return: JSON:API resource object
    """
    result = {"id": record_id(record), "type": config.type, "attributes": serialize_attributes(record, config)}
    if config.relationships:
        result["relationships"] = serialize_relationships(record, config)
    return result
