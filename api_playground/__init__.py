# flake8: noqa: F401
#
# Declarative JSON:API playground for Flask-SQLAlchemy models
#
from .playground_init import DB, log, Playground, dict_merge
from .errors import (
    ConfigurationError,
    JsonapiError,
    ModelNotFoundError,
    RecordNotFoundError,
    RequestNotSupportedError,
    ParameterMissingError,
    ValidationError,
    DeletionError,
    UnAuthorizedError,
)
from .model_config import ModelConfiguration, FilterType
from .registry import PlaygroundRegistry
from .repository import SQLAlchemyRepository, SaveResult
from .serializer import serialize
from .dispatcher import PlaygroundDispatcher, DispatchResult
from .api_key import ApiKey, TokenStatus, validate_token
from .playground_api import PlaygroundAPI
from .swagger_doc import generate_openapi_spec
from .__about__ import __version__, __description__

__all__ = (
    "__version__",
    "__description__",
    #
    "PlaygroundAPI",
    "PlaygroundRegistry",
    "PlaygroundDispatcher",
    "DispatchResult",
    "Playground",
    # configuration:
    "ModelConfiguration",
    "FilterType",
    # storage:
    "DB",
    "SQLAlchemyRepository",
    "SaveResult",
    "serialize",
    # api keys:
    "ApiKey",
    "TokenStatus",
    "validate_token",
    # docs:
    "generate_openapi_spec",
    # Errors:
    "ConfigurationError",
    "JsonapiError",
    "ModelNotFoundError",
    "RecordNotFoundError",
    "RequestNotSupportedError",
    "ParameterMissingError",
    "ValidationError",
    "DeletionError",
    "UnAuthorizedError",
)
