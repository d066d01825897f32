# Response class and Flask-RESTful representation
import json
from http import HTTPStatus
from flask import Response
from .json_encoder import PlaygroundJSONEncoder

JSONAPI_MIMETYPE = "application/vnd.api+json"


class PlaygroundResponse(Response):
    """
    Response class, JSON:API documents are sent with the "application/vnd.api+json" content type
    """

    default_mimetype = JSONAPI_MIMETYPE


def dump_document(document) -> str:
    return json.dumps(document, cls=PlaygroundJSONEncoder)


def output_jsonapi(data, code, headers=None):
    """
    Flask-RESTful representation for the JSON:API mediatype
    :param data: document, None for responses without body
    :param code: http status code
    :param headers: additional response headers
    """
    if data is None or code == HTTPStatus.NO_CONTENT:
        response = PlaygroundResponse(status=code)
        response.headers.extend(headers or {})
        return response
    response = PlaygroundResponse(dump_document(data) + "\n", status=code)
    response.headers.extend(headers or {})
    return response
