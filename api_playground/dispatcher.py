"""
Playground operations: list, show, create, update, delete

The dispatcher resolves the model from the registry, checks that the operation is enabled,
whitelists the request attributes, calls the model repository and serializes the result.

Domain errors (JsonapiError subclasses) are converted to JSON:API error documents here,
all other exceptions propagate to the caller.
"""
from collections.abc import Mapping
from dataclasses import dataclass
from functools import wraps
from http import HTTPStatus
from typing import Any, Optional, Tuple
import api_playground
from .errors import (
    JsonapiError,
    ModelNotFoundError,
    ParameterMissingError,
    RecordNotFoundError,
    RequestNotSupportedError,
    ValidationError,
    DeletionError,
    jsonapi_error_document,
)
from .jsonapi_formatting import build_list_meta, build_show_meta, plan_query
from .model_config import ModelConfiguration
from .registry import PlaygroundRegistry
from .serializer import serialize
from .util import is_scalar, singularize


@dataclass(frozen=True)
class DispatchResult:
    """
    :param status: http status code
    :param document: JSON:API document, None when the response has no body
    """

    status: int
    document: Optional[dict] = None

    def __iter__(self):
        # allows `document, status = result` style unpacking in flask-restful resources
        return iter((self.document, self.status))


def jsonapi_errors(func):
    """
    Decorator converting the domain errors raised by an operation to an error DispatchResult
    """

    @wraps(func)
    def operation_wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except JsonapiError as exc:
            return DispatchResult(exc.status_code, jsonapi_error_document(exc))

    return operation_wrapper


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, Mapping, list, tuple)):
        return not value
    return False


def extract_attributes(payload: Any) -> dict:
    """
    :param payload: request body
    :return: the "data.attributes" member of the body
    :raises ParameterMissingError: when "data" or "attributes" are missing or blank
    """
    data = payload.get("data") if isinstance(payload, Mapping) else None
    if _is_blank(data):
        raise ParameterMissingError("data")
    attributes = data.get("attributes") if isinstance(data, Mapping) else None
    if _is_blank(attributes) or not isinstance(attributes, Mapping):
        raise ParameterMissingError("attributes")
    return attributes


def permit(attributes: Mapping, allowed_fields) -> dict:
    """
    :return: the attributes that are allowed to be written, only scalar values are kept
    """
    result = {}
    allowed_fields = set(allowed_fields)
    for attr_name, value in attributes.items():
        if attr_name not in allowed_fields:
            api_playground.log.debug(f"Unpermitted attribute {attr_name}")
            continue
        if not is_scalar(value):
            api_playground.log.debug(f"Unpermitted value for {attr_name}: {value!r}")
            continue
        result[attr_name] = value
    return result


class PlaygroundDispatcher:
    """
    Executes playground operations against the models of a registry
    """

    operations = ("list", "show", "create", "update", "delete")

    def __init__(self, registry: PlaygroundRegistry) -> None:
        self.registry = registry

    @property
    def available_models(self) -> list:
        return self.registry.model_names

    def resolve(self, model_name: str) -> Tuple[str, ModelConfiguration]:
        """
        :param model_name: model name as requested, e.g. "recipes"
        :return: (registered name, configuration)
        :raises ModelNotFoundError: when the model isn't registered or has no storage
        The name is singularized before the lookup, a registered name that inflection would mangle
        (e.g. "address" => "addres") is used as-is
        """
        model_name = str(model_name)
        for candidate in (singularize(model_name), model_name):
            config = self.registry.lookup(candidate)
            if config is not None and config.repository is not None:
                return candidate, config
        raise ModelNotFoundError(model_name, self.available_models)

    def find(self, config: ModelConfiguration, name: str, record_id: Any, includes=()) -> Any:
        record = config.repository.find_by_id(record_id, includes)
        if record is None:
            raise RecordNotFoundError(name, record_id)
        return record

    def dispatch(
        self, operation: str, model_name: str, record_id: Any = None, params: Any = None, payload: Any = None
    ) -> DispatchResult:
        """
        :param operation: one of list, show, create, update, delete
        :param model_name: model name from the url
        :param record_id: record id from the url
        :param params: (filters, page) tuple for list requests
        :param payload: request body for create and update requests
        """
        if operation == "list":
            filters, page = params or ({}, {})
            return self.list(model_name, filters, page)
        if operation == "show":
            return self.show(model_name, record_id)
        if operation == "create":
            return self.create(model_name, payload)
        if operation == "update":
            return self.update(model_name, record_id, payload)
        if operation == "delete":
            return self.delete(model_name, record_id)
        raise ValueError(f"Invalid playground operation {operation}")

    @jsonapi_errors
    def list(self, model_name: str, filters: Optional[Mapping] = None, page: Optional[Mapping] = None) -> DispatchResult:
        """
        Retrieve a filtered and paginated collection
        """
        _, config = self.resolve(model_name)
        repository = config.repository
        plan = plan_query(filters, page, config)

        total_count = None
        if config.pagination.enabled and config.pagination.total_count:
            # count the filtered collection, before pagination
            total_count = repository.count(plan.predicates)

        if plan.page is not None:
            records = repository.where(plan.predicates, config.relationships, offset=plan.page.offset, limit=plan.page.limit)
        else:
            records = repository.where(plan.predicates, config.relationships)

        document = {
            "data": [serialize(record, config) for record in records],
            "meta": build_list_meta(config, self.available_models, plan, total_count),
        }
        return DispatchResult(HTTPStatus.OK.value, document)

    @jsonapi_errors
    def show(self, model_name: str, record_id: Any) -> DispatchResult:
        name, config = self.resolve(model_name)
        record = self.find(config, name, record_id, config.relationships)
        document = {"data": serialize(record, config), "meta": build_show_meta(config, self.available_models)}
        return DispatchResult(HTTPStatus.OK.value, document)

    @jsonapi_errors
    def create(self, model_name: str, payload: Any) -> DispatchResult:
        _, config = self.resolve(model_name)
        if not config.allows("create"):
            raise RequestNotSupportedError(model_name, "create")

        attributes = permit(extract_attributes(payload), config.allowed_fields("create"))
        result = config.repository.save(attributes)
        if result.errors:
            raise ValidationError(result.errors)
        api_playground.log.info(f"Created {config.name} {result.record}")
        return DispatchResult(HTTPStatus.CREATED.value, {"data": serialize(result.record, config)})

    @jsonapi_errors
    def update(self, model_name: str, record_id: Any, payload: Any) -> DispatchResult:
        name, config = self.resolve(model_name)
        if not config.allows("update"):
            raise RequestNotSupportedError(model_name, "update")

        record = self.find(config, name, record_id)
        attributes = permit(extract_attributes(payload), config.allowed_fields("update"))
        result = config.repository.update(record, attributes)
        if result.errors:
            raise ValidationError(result.errors)
        return DispatchResult(HTTPStatus.OK.value, {"data": serialize(result.record, config)})

    @jsonapi_errors
    def delete(self, model_name: str, record_id: Any) -> DispatchResult:
        name, config = self.resolve(model_name)
        if not config.allows("delete"):
            raise RequestNotSupportedError(model_name, "delete")

        record = self.find(config, name, record_id)
        if not config.repository.destroy(record):
            raise DeletionError(name, record_id)
        api_playground.log.info(f"Deleted {name} {record_id}")
        return DispatchResult(HTTPStatus.NO_CONTENT.value)
