"""
Registry of the models exposed in a playground

    registry = PlaygroundRegistry()
    registry.playground_for("recipe", Recipe,
                            attributes=["title", {"timestamps": ["created_at", "updated_at"]}],
                            requests={"create": {"fields": ["title", "body"]}, "delete": True})

The registry is passed to the dispatcher, so several independently configured
playgrounds can be exposed by the same app.
"""
import operator
from collections import OrderedDict
from typing import Any, Iterator, Optional
import api_playground
from .model_config import (
    ModelConfiguration,
    normalize_attributes,
    normalize_filters,
    normalize_pagination,
    normalize_relationships,
    normalize_requests,
)
from .repository import SQLAlchemyRepository

_DECLARATION_OPTIONS = ("attributes", "relationships", "requests", "filters", "pagination")


def build_accessors(field_names, model: Any = None) -> dict:
    """
    :param field_names: exposed attribute and relationship names
    :param model: class of the records, used to report missing fields early
    :return: {field name: function reading the field from a record}
    """
    accessors = {}
    for field_name in field_names:
        if model is not None and not hasattr(model, field_name):
            api_playground.log.warning(f"{model.__name__} has no attribute '{field_name}'")
        accessors[field_name] = operator.attrgetter(field_name)
    return accessors


class PlaygroundRegistry:
    """
    Holds the normalized ModelConfiguration for every model name
    """

    def __init__(self) -> None:
        self._configs = OrderedDict()
        # raw declarations, kept for reconfigure()
        self._declarations = {}

    def __contains__(self, model_name: str) -> bool:
        return str(model_name) in self._configs

    def __iter__(self) -> Iterator[ModelConfiguration]:
        return iter(list(self._configs.values()))

    def __len__(self) -> int:
        return len(self._configs)

    def register(
        self,
        model_name: str,
        model: Any = None,
        *,
        attributes: Any = None,
        relationships: Any = None,
        requests: Any = None,
        filters: Any = None,
        pagination: Any = None,
        repository: Any = None,
        db: Any = None,
    ) -> ModelConfiguration:
        """
        Normalize and store the declaration of a model, registering a name twice overwrites the first declaration
        :param model_name: singular, lower-case name, e.g. "recipe"
        :param model: SQLAlchemy model class of the records
        :param repository: storage accessor, defaults to an SQLAlchemyRepository for `model`
        :param db: flask_sqlalchemy instance used by the default repository
        :raises ConfigurationError: when a filter declaration is invalid
        """
        model_name = str(model_name)
        if repository is None and model is not None:
            repository = SQLAlchemyRepository(model, db=db)
        if model is None and repository is not None:
            model = getattr(repository, "model", None)

        attributes = normalize_attributes(attributes)
        relationships = normalize_relationships(relationships)
        field_names = [attr for fields in attributes.values() for attr in fields] + list(relationships)

        config = ModelConfiguration(
            name=model_name,
            attributes=attributes,
            relationships=relationships,
            requests=normalize_requests(requests),
            filters=normalize_filters(filters),
            pagination=normalize_pagination(pagination),
            repository=repository,
            accessors=build_accessors(field_names, model),
        )
        if model_name in self._configs:
            api_playground.log.info(f"Redeclaring playground model {model_name}")
        self._configs[model_name] = config
        self._declarations[model_name] = dict(
            model=model,
            attributes=attributes,
            relationships=relationships,
            requests=requests,
            filters=filters,
            pagination=pagination,
            repository=repository,
            db=db,
        )
        api_playground.log.info(f"Registered playground model {model_name} ({config.type})")
        return config

    playground_for = register

    def reconfigure(self, model_name: str, **options: Any) -> ModelConfiguration:
        """
        Replace some options of an existing declaration, e.g.
            registry.reconfigure("recipe", pagination={"enabled": False})
        Configurations are shared by all requests, this is meant for tests and administrative changes
        """
        model_name = str(model_name)
        if model_name not in self._declarations:
            raise KeyError(model_name)
        declaration = dict(self._declarations[model_name])
        for key, value in options.items():
            if key not in _DECLARATION_OPTIONS:
                raise TypeError(f"Invalid playground option {key}")
            declaration[key] = value
        return self.register(model_name, **declaration)

    def unregister(self, model_name: str) -> None:
        self._configs.pop(str(model_name), None)
        self._declarations.pop(str(model_name), None)

    def lookup(self, model_name: str) -> Optional[ModelConfiguration]:
        """
        :return: the configuration of the model or None
        """
        return self._configs.get(str(model_name))

    @property
    def model_names(self) -> list:
        """
        :return: the registered model names, in registration order
        """
        return list(self._configs.keys())
