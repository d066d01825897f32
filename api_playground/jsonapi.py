#  This file contains the playground flask-restful "Resource" objects:
#  - PlaygroundCollectionAPI: GET (list) and POST (create) on /<model_name>
#  - PlaygroundInstanceAPI: GET (show), PATCH (update) and DELETE on /<model_name>/<id>
#  - PlaygroundDocsAPI: GET /docs, the OpenAPI document
#
# The resources receive the dispatcher and the db through flask-restful `resource_class_kwargs`
#
# pylint: disable=redefined-builtin, logging-format-interpolation
#
import json
from functools import wraps
from http import HTTPStatus
from flask import Response, request
from flask_restful import Resource
import api_playground
from .request import get_jsonapi_payload, parse_jsonapi_args
from .swagger_doc import dump_yaml, generate_openapi_spec
from .util import singularize

DOCS_MODEL_NAME = "doc"
DOCS_NOT_AVAILABLE = {
    "error": "Documentation not available",
    "message": "To enable API documentation, create the PlaygroundAPI with docs=True",
}


def http_method_decorator(fun):
    """Decorator for the playground HTTP methods (get, post, patch, delete)
    - commit the database when the operation succeeded
    - rollback when the operation resulted in an error document
    - rollback and re-raise any other exception, these are handled by the app

    :param fun: resource method returning a DispatchResult
    :return: wrapped fun, returning a (document, status) tuple
    """

    @wraps(fun)
    def method_wrapper(self, *args, **kwargs):
        session = self.db.session
        try:
            result = fun(self, *args, **kwargs)
        except Exception as exc:
            api_playground.log.exception(exc)
            session.rollback()
            raise

        if isinstance(result, Response):
            return result
        if result.status < HTTPStatus.BAD_REQUEST:
            session.commit()
        else:
            session.rollback()
        return result.document, result.status

    return method_wrapper


class PlaygroundResource(Resource):
    """
    Superclass for the playground endpoints
    """

    def __init__(self, dispatcher=None, db=None, docs=True, **kwargs):
        super().__init__()
        self.dispatcher = dispatcher
        self.db = db
        self.docs = docs

    def docs_not_available(self, model_name):
        """
        :return: 404 response when the docs are requested from a playground without docs
        """
        if self.docs or singularize(str(model_name)) != DOCS_MODEL_NAME:
            return None
        return Response(json.dumps(DOCS_NOT_AVAILABLE), status=HTTPStatus.NOT_FOUND, mimetype="application/json")


class PlaygroundCollectionAPI(PlaygroundResource):
    """
    /<model_name>
    """

    @http_method_decorator
    def get(self, model_name):
        """
        List the records, filtered with filters[<field>] and paginated with page[number] / page[size]
        """
        docs_response = self.docs_not_available(model_name)
        if docs_response is not None:
            return docs_response
        return self.dispatcher.list(model_name, *parse_jsonapi_args(request.args))

    @http_method_decorator
    def post(self, model_name):
        return self.dispatcher.create(model_name, get_jsonapi_payload(request))


class PlaygroundInstanceAPI(PlaygroundResource):
    """
    /<model_name>/<id>
    """

    @http_method_decorator
    def get(self, model_name, id):
        docs_response = self.docs_not_available(model_name)
        if docs_response is not None:
            return docs_response
        return self.dispatcher.show(model_name, id)

    @http_method_decorator
    def patch(self, model_name, id):
        return self.dispatcher.update(model_name, id, get_jsonapi_payload(request))

    @http_method_decorator
    def delete(self, model_name, id):
        return self.dispatcher.delete(model_name, id)


class PlaygroundDocsAPI(PlaygroundResource):
    """
    /docs
    The OpenAPI document is generated for every request because the server url and
    the base path are taken from the request. Use ?yaml=1 to get it in yaml format.
    """

    custom_swagger = None

    def __init__(self, custom_swagger=None, **kwargs):
        super().__init__(**kwargs)
        self.custom_swagger = custom_swagger

    def get(self):
        base_path = request.path
        if base_path.endswith("/docs"):
            base_path = base_path[: -len("/docs")]
        spec = generate_openapi_spec(self.dispatcher.registry, request.host_url, base_path, self.custom_swagger)
        if request.args.get("yaml"):
            return Response(dump_yaml(spec), mimetype="application/x-yaml")
        return Response(json.dumps(spec, indent=2), mimetype="application/json")
