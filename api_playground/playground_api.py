# flask_restful API subclass exposing a playground registry
import logging
from collections import OrderedDict
from flask import Blueprint, Flask, request
from flask_restful import Api
from flask_swagger_ui import get_swaggerui_blueprint
from werkzeug.exceptions import HTTPException, MethodNotAllowed
import api_playground
from .api_key import check_api_key
from .cli import keys_cli
from .config import get_config
from .dispatcher import PlaygroundDispatcher
from .errors import UnAuthorizedError, jsonapi_error_document
from .jsonapi import PlaygroundCollectionAPI, PlaygroundDocsAPI, PlaygroundInstanceAPI
from .registry import PlaygroundRegistry
from .response import JSONAPI_MIMETYPE, output_jsonapi

DEFAULT_REPRESENTATIONS = [(JSONAPI_MIMETYPE, output_jsonapi), ("application/json", output_jsonapi)]


class PlaygroundAPI(Api):
    """
    Exposes the models of a PlaygroundRegistry on a blueprint:

        GET    {prefix}/docs
        GET    {prefix}/<model_name>
        GET    {prefix}/<model_name>/<id>
        POST   {prefix}/<model_name>
        PATCH  {prefix}/<model_name>/<id>
        DELETE {prefix}/<model_name>/<id>

    Several playgrounds can be exposed by the same app, each with its own registry, name and prefix.
    """

    def __init__(
        self,
        app: Flask,
        registry: PlaygroundRegistry = None,
        prefix: str = None,
        protected: bool = False,
        docs: bool = True,
        app_db=None,
        name: str = "api_playground",
        swaggerui_blueprint: bool = True,
        custom_swagger: dict = None,
    ) -> None:
        """
        :param app: Flask app
        :param registry: registry with the exposed models, a new one is created if omitted
        :param prefix: url prefix, defaults to DEFAULT_PREFIX ("/api/playground")
        :param protected: require a valid api key for every request
        :param docs: expose the OpenAPI document on {prefix}/docs
        :param app_db: flask_sqlalchemy instance, defaults to the one registered on the app
        :param name: blueprint name
        :param swaggerui_blueprint: expose the swagger ui on {prefix}/ui (only when docs are enabled)
        :param custom_swagger: dict merged into the generated OpenAPI document
        """
        if not isinstance(app, Flask):  # pragma: no cover
            raise TypeError("'app' should be Flask.")

        self.registry = registry if registry is not None else PlaygroundRegistry()
        self.dispatcher = PlaygroundDispatcher(self.registry)
        self.url_prefix = (prefix if prefix is not None else get_config("DEFAULT_PREFIX")).rstrip("/")
        self.protected = protected
        self.docs = docs
        self.name = name

        if app_db is None:
            app_db = app.extensions.get("sqlalchemy", api_playground.DB)
        api_playground.Playground.db = self.db = app_db

        if app.config.get("DEBUG", False):
            api_playground.log.setLevel(logging.DEBUG)

        blueprint = Blueprint(name, __name__, url_prefix=self.url_prefix)
        blueprint.before_request(self.check_api_key)
        super().__init__(blueprint, default_mediatype=JSONAPI_MIMETYPE)
        self.representations = OrderedDict(DEFAULT_REPRESENTATIONS)

        resource_kwargs = {"dispatcher": self.dispatcher, "db": self.db, "docs": docs}
        if docs:
            api_playground.log.info(f"Exposing playground docs on {self.url_prefix}/docs")
            self.add_resource(
                PlaygroundDocsAPI,
                "/docs",
                endpoint="docs",
                methods=["GET"],
                resource_class_kwargs=dict(resource_kwargs, custom_swagger=custom_swagger),
            )
        api_playground.log.info(f"Exposing playground collections on {self.url_prefix}/<model_name>")
        self.add_resource(
            PlaygroundCollectionAPI,
            "/<string:model_name>",
            endpoint="collection",
            methods=["GET", "POST"],
            resource_class_kwargs=resource_kwargs,
        )
        api_playground.log.info(f"Exposing playground instances on {self.url_prefix}/<model_name>/<id>")
        self.add_resource(
            PlaygroundInstanceAPI,
            "/<string:model_name>/<string:id>",
            endpoint="instance",
            methods=["GET", "PATCH", "DELETE"],
            resource_class_kwargs=resource_kwargs,
        )
        app.register_blueprint(blueprint)
        self.blueprint = blueprint

        if docs and swaggerui_blueprint:
            ui_blueprint = get_swaggerui_blueprint(
                f"{self.url_prefix}/ui",
                f"{self.url_prefix}/docs",
                config={"docExpansion": "none", "defaultModelsExpandDepth": -1},
                blueprint_name=f"{name}_ui",
            )
            app.register_blueprint(ui_blueprint, url_prefix=f"{self.url_prefix}/ui")

        if "playground-keys" not in app.cli.commands:
            app.cli.add_command(keys_cli)

        # pylint: disable=unused-argument,unused-variable
        @app.teardown_appcontext
        def shutdown_session(exception=None):
            """cfr. https://flask.palletsprojects.com/en/latest/patterns/sqlalchemy/"""
            self.db.session.remove()

    def playground_for(self, model_name, model=None, **options):
        """
        Register a model in the registry of this playground, cfr. PlaygroundRegistry.register
        """
        options.setdefault("db", self.db)
        return self.registry.register(model_name, model, **options)

    def protect(self) -> None:
        """
        Require a valid api key for all requests to this playground
        """
        self.protected = True

    def unprotect(self) -> None:
        self.protected = False

    def handle_error(self, e):
        """
        werkzeug http exceptions raised on the playground routes (e.g. a method that isn't allowed on a route)
        are returned as a JSON:API error document, other exceptions are handled by flask-restful
        """
        if not isinstance(e, HTTPException):
            return super().handle_error(e)
        api_playground.log.info(f"{e.code} {e.name}: {request.method} {request.path}")
        document = {"errors": [{"status": str(e.code), "title": e.name, "detail": e.description}]}
        response = output_jsonapi(document, e.code)
        if isinstance(e, MethodNotAllowed) and e.valid_methods:
            response.headers["Allow"] = ", ".join(e.valid_methods)
        return response

    def check_api_key(self):
        """
        blueprint before_request hook: returns a 401 response when the api key is missing, unknown or expired
        """
        if not self.protected or request.method == "OPTIONS":
            return None
        try:
            check_api_key(request.headers.get(get_config("API_KEY_HEADER")))
        except UnAuthorizedError as exc:
            return output_jsonapi(jsonapi_error_document(exc), exc.status_code)
        return None
