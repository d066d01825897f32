"""
Parse the playground request arguments

query args:
    filters[<field>]=<value>
    page[number], page[size]
body:
    {"data": {"type": "recipes", "attributes": {...}}}

Both "application/json" and "application/vnd.api+json" bodies are accepted,
other content types are logged but parsed anyway.
"""
import re
from typing import Any, Optional, Tuple
import api_playground

JSONAPI_CONTENT_TYPES = ["application/json", "application/vnd.api+json"]
FILTERS_RE = re.compile(r"^filters\[([^\[\]]+)\]$")
PAGE_RE = re.compile(r"^page\[(\w+)\]$")


def parse_jsonapi_args(args) -> Tuple[dict, dict]:
    """
    :param args: request query args (werkzeug MultiDict or dict)
    :return: (filters, page) dicts, e.g. ({"title": "soup"}, {"number": "2", "size": "10"})
    """
    filters = {}
    page = {}
    for arg, val in args.items():
        filter_attr = FILTERS_RE.search(arg)
        if filter_attr:
            filters[filter_attr.group(1)] = val
            continue
        page_attr = PAGE_RE.search(arg)
        if page_attr:
            page[page_attr.group(1)] = val
    return filters, page


def get_jsonapi_payload(request) -> Optional[Any]:
    """
    :param request: flask request
    :return: the parsed json body, None if the body is missing or malformed
    """
    content_type = (request.content_type or "").split(";")[0].strip()
    if content_type and content_type not in JSONAPI_CONTENT_TYPES:
        api_playground.log.warning(f'Invalid Media Type! "{request.content_type}"')
    payload = request.get_json(force=True, silent=True)
    if payload is None and request.get_data():
        api_playground.log.info("Request body is not valid json")
    return payload
