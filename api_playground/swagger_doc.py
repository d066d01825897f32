#
# OpenAPI 3 documentation of the playground endpoints
#
# The document is derived from the registry: every model gets a collection path
#   {base}/{plural}        get (+ post when create is enabled)
# and an instance path
#   {base}/{plural}/{id}   get (+ patch / delete when enabled)
# Request body schemas and examples are guessed from the field names.
#
import datetime
import re
from http import HTTPStatus
import yaml
import api_playground
from .config import get_config
from .model_config import UNGROUPED, FilterType, ModelConfiguration
from .registry import PlaygroundRegistry
from .serializer import format_attribute_value
from .util import camelize, humanize, pluralize

OPENAPI_VERSION = "3.0.3"
REQUIRED_PATTERNS = ("title", "name", "email")

ID_RE = re.compile(r"(_id$|^id$)")
TIMESTAMP_RE = re.compile(r"(_at$|_on$|^created|^updated|^timestamp$)")
COUNT_RE = re.compile(r"(_count$|^count$|^quantity$|^number$|^age$)")
BOOLEAN_RE = re.compile(r"(^is_|^has_|^active$|^enabled$|^published$)")
MONEY_RE = re.compile(r"(^price$|^cost$|^amount$|_price$|_cost$)")
URL_RE = re.compile(r"(^url$|^website$|_url$)")
LONG_TEXT = ("description", "summary", "bio", "about", "content")

EXAMPLE_VALUES = {
    "author_id": 1,
    "user_id": 1,
    "category_id": 2,
    "book_id": 3,
    "email": "user@example.com",
    "age": 25,
    "number": 42,
    "price": 29.99,
    "cost": 29.99,
    "amount": 29.99,
    "unit_price": 9.99,
    "total_cost": 99.99,
    "url": "https://example.com",
    "website": "https://example.com",
    "image_url": "https://example.com/image.jpg",
    "profile_url": "https://example.com/profile",
    "title": "Sample Title",
    "name": "Sample Name",
    "first_name": "John",
    "last_name": "Doe",
    "description": "This is a detailed description that provides comprehensive information about the item.",
    "summary": "A brief summary of the content.",
    "body": "This is the main content body with detailed information.",
    "bio": "A brief biography or about section.",
    "about": "A brief biography or about section.",
    "content": "Main content goes here with detailed information.",
    "tags": "tag1, tag2, tag3",
    "status": "active",
    "type": "standard",
    "category": "general",
}


def example_value(field_name: str):
    """
    :return: a realistic example value for the field, based on its name
    """
    field_name = str(field_name)
    if field_name in EXAMPLE_VALUES:
        return EXAMPLE_VALUES[field_name]
    if ID_RE.search(field_name):
        return 1
    if TIMESTAMP_RE.search(field_name):
        return format_attribute_value(datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0))
    if COUNT_RE.search(field_name):
        return 10
    if BOOLEAN_RE.search(field_name):
        return True
    if MONEY_RE.search(field_name):
        return 19.99
    if URL_RE.search(field_name):
        return "https://example.com"
    if len(field_name) <= 10:
        return f"Sample {humanize(field_name)}"
    return f"Sample {humanize(field_name).lower()} content"


def attribute_schema(field_name: str) -> dict:
    field_name = str(field_name)
    if ID_RE.search(field_name):
        schema = {"type": "integer", "description": "Numeric identifier"}
    elif TIMESTAMP_RE.search(field_name):
        schema = {"type": "string", "format": "date-time", "description": "ISO8601 timestamp"}
    elif field_name == "email":
        schema = {"type": "string", "format": "email", "description": "Email address"}
    elif COUNT_RE.search(field_name):
        schema = {"type": "integer", "description": "Numeric value"}
    elif BOOLEAN_RE.search(field_name):
        schema = {"type": "boolean", "description": "Boolean flag"}
    elif MONEY_RE.search(field_name):
        schema = {"type": "number", "format": "float", "description": "Monetary value"}
    elif URL_RE.search(field_name):
        schema = {"type": "string", "format": "uri", "description": "URL"}
    elif field_name in LONG_TEXT:
        schema = {"type": "string", "description": "Long text content"}
    else:
        schema = {"type": "string", "description": humanize(field_name)}
    schema["example"] = example_value(field_name)
    return schema


def filter_schema(field_name: str) -> dict:
    if ID_RE.search(field_name):
        return {"type": "integer", "description": "Numeric identifier"}
    if TIMESTAMP_RE.search(field_name):
        return {"type": "string", "format": "date-time", "description": "ISO8601 timestamp"}
    if field_name == "email":
        return {"type": "string", "format": "email", "description": "Email address"}
    if COUNT_RE.search(field_name) and field_name != "age":
        return {"type": "integer", "description": "Numeric value"}
    if BOOLEAN_RE.search(field_name):
        return {"type": "boolean", "description": "Boolean value"}
    return {"type": "string", "description": "Text value"}


def filter_example(field_name: str, filter_type: FilterType):
    partial = filter_type == FilterType.PARTIAL
    if ID_RE.search(field_name):
        return 1
    if field_name == "title":
        return "Recipe" if partial else "Spaghetti Carbonara"
    if field_name == "name":
        return "John" if partial else "John Doe"
    if field_name == "email":
        return "user@example.com"
    if field_name == "status":
        return "published"
    if BOOLEAN_RE.search(field_name):
        return True
    if re.search(r"(_count$|^count$|^quantity$)", field_name):
        return 10
    return "search term" if partial else "exact value"


def required_fields(fields) -> list:
    return [str(field) for field in fields if any(pattern in str(field) for pattern in REQUIRED_PATTERNS)]


def id_parameter(model_name: str) -> dict:
    return {
        "name": "id",
        "in": "path",
        "required": True,
        "description": f"ID of the {humanize(model_name).lower()}",
        "schema": {"type": "integer"},
    }


def list_parameters(config: ModelConfiguration) -> list:
    """
    :return: pagination and filter query parameters of a list operation
    """
    parameters = []
    if config.pagination.enabled:
        page_size = config.pagination.page_size
        max_page_size = get_config("MAX_PAGE_SIZE")
        parameters.append(
            {
                "name": "page[number]",
                "in": "query",
                "description": "Page number for pagination (starts from 1)",
                "required": False,
                "schema": {"type": "integer", "minimum": 1, "default": 1, "example": 1},
            }
        )
        parameters.append(
            {
                "name": "page[size]",
                "in": "query",
                "description": f"Number of items per page (maximum: {max_page_size})",
                "required": False,
                "schema": {"type": "integer", "minimum": 1, "maximum": max_page_size, "default": page_size, "example": page_size},
            }
        )

    for filter_config in config.filters:
        if filter_config.type == FilterType.EXACT:
            type_description = "exact match"
        else:
            type_description = "partial match (case-insensitive search)"
        parameters.append(
            {
                "name": f"filters[{filter_config.field}]",
                "in": "query",
                "description": f"Filter by {humanize(filter_config.field).lower()} using {type_description}",
                "required": False,
                "schema": filter_schema(filter_config.field),
                "example": filter_example(filter_config.field, filter_config.type),
            }
        )
    return parameters


def list_description(config: ModelConfiguration) -> str:
    result = f"Retrieve a list of {humanize(config.type).lower()}"
    features = []
    if config.pagination.enabled:
        features.append("pagination")
    if config.filters:
        features.append("filtering")
    if features:
        result += " with " + " and ".join(features)
    if config.filters:
        result += ". Available filters: " + ", ".join(f.field for f in config.filters)
    return result


def request_body(config: ModelConfiguration, operation: str) -> dict:
    """
    Request body of a create/update operation, with a schema and example for the writable fields
    """
    fields = config.allowed_fields(operation)
    if not fields:
        return {"required": True}
    resource_type = config.type
    return {
        "required": True,
        "content": {
            "application/json": {
                "schema": {
                    "type": "object",
                    "required": ["data"],
                    "properties": {
                        "data": {
                            "type": "object",
                            "required": ["type", "attributes"],
                            "properties": {
                                "type": {"type": "string", "enum": [resource_type], "example": resource_type},
                                "attributes": {
                                    "type": "object",
                                    "properties": {field: attribute_schema(field) for field in fields},
                                    "required": required_fields(fields),
                                },
                            },
                        }
                    },
                },
                "example": {"data": {"type": resource_type, "attributes": {field: example_value(field) for field in fields}}},
            }
        },
    }


def _responses(*codes_descriptions) -> dict:
    return {str(code): {"description": description} for code, description in codes_descriptions}


def model_paths(config: ModelConfiguration, base_path: str) -> dict:
    name = config.name
    human_name = humanize(name)
    tags = [human_name]
    collection_path = f"{base_path}/{config.type}"
    instance_path = f"{collection_path}/{{id}}"

    collection_operations = {
        "get": {
            "summary": f"List {humanize(config.type)}",
            "description": list_description(config),
            "tags": tags,
            "responses": _responses((200, "Successful response"), (401, "Unauthorized"), (404, "Not found")),
        }
    }
    parameters = list_parameters(config)
    if parameters:
        collection_operations["get"]["parameters"] = parameters
    if config.allows("create"):
        collection_operations["post"] = {
            "summary": f"Create {human_name}",
            "description": f"Create a new {human_name.lower()}",
            "tags": tags,
            "requestBody": request_body(config, "create"),
            "responses": _responses((201, "Created successfully"), (400, "Bad request"), (422, "Validation error")),
        }

    instance_operations = {
        "get": {
            "summary": f"Get {human_name}",
            "description": f"Retrieve a specific {human_name.lower()} by ID",
            "tags": tags,
            "parameters": [id_parameter(name)],
            "responses": _responses((200, "Successful response"), (401, "Unauthorized"), (404, "Not found")),
        }
    }
    if config.allows("update"):
        instance_operations["patch"] = {
            "summary": f"Update {human_name}",
            "description": f"Update an existing {human_name.lower()}",
            "tags": tags,
            "parameters": [id_parameter(name)],
            "requestBody": request_body(config, "update"),
            "responses": _responses(
                (200, "Updated successfully"), (400, "Bad request"), (404, "Not found"), (422, "Validation error")
            ),
        }
    if config.allows("delete"):
        instance_operations["delete"] = {
            "summary": f"Delete {human_name}",
            "description": f"Delete an existing {human_name.lower()}",
            "tags": tags,
            "parameters": [id_parameter(name)],
            "responses": _responses((HTTPStatus.NO_CONTENT.value, "Deleted successfully"), (401, "Unauthorized"), (404, "Not found")),
        }
    return {collection_path: collection_operations, instance_path: instance_operations}


def model_schemas(config: ModelConfiguration) -> dict:
    class_name = camelize(config.name)
    properties = {field: {"type": "string"} for field in config.attributes.get(UNGROUPED, ())}
    return {
        f"{class_name}Resource": {
            "type": "object",
            "properties": {
                "id": {"type": "string"},
                "type": {"type": "string", "enum": [pluralize(config.name)]},
                "attributes": {"type": "object", "properties": properties},
            },
        },
        f"{class_name}Response": {"type": "object", "properties": {"data": {"$ref": f"#/components/schemas/{class_name}Resource"}}},
    }


def components(registry: PlaygroundRegistry) -> dict:
    schemas = {}
    for config in registry:
        schemas.update(model_schemas(config))
    schemas["ErrorObject"] = {
        "type": "object",
        "properties": {"status": {"type": "string"}, "title": {"type": "string"}, "detail": {"type": "string"}},
    }
    return {
        "schemas": schemas,
        "responses": {
            "BadRequest": {"description": "Bad Request"},
            "Unauthorized": {"description": "Unauthorized"},
            "NotFound": {"description": "Resource not found"},
        },
        "securitySchemes": {"ApiKeyAuth": {"type": "apiKey", "in": "header", "name": get_config("API_KEY_HEADER")}},
    }


def generate_openapi_spec(registry: PlaygroundRegistry, base_url: str, base_path: str, custom_swagger: dict = None) -> dict:
    """
    :param registry: registry of the documented models
    :param base_url: server url, e.g. "http://localhost:5000"
    :param base_path: path prefix of the playground endpoints, e.g. "/api/playground"
    :param custom_swagger: dict merged into the generated document
    :return: OpenAPI 3 document
    """
    base_path = base_path.rstrip("/")
    paths = {}
    for config in registry:
        paths.update(model_paths(config, base_path))

    spec = {
        "openapi": OPENAPI_VERSION,
        "info": {
            "title": get_config("DOCS_TITLE"),
            "version": get_config("DOCS_VERSION"),
            "description": get_config("DOCS_DESCRIPTION"),
        },
        "servers": [{"url": base_url.rstrip("/"), "description": "Current server"}],
        "paths": paths,
        "components": components(registry),
    }
    if custom_swagger:
        api_playground.dict_merge(spec, custom_swagger)
    return spec


def dump_yaml(spec: dict) -> str:
    return yaml.safe_dump(spec, sort_keys=False, allow_unicode=True)
