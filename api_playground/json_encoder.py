# playground to json encoding

import datetime
import decimal
import json
from uuid import UUID
import api_playground
from .config import is_debug
from .serializer import format_attribute_value


class PlaygroundJSONEncoder(json.JSONEncoder):
    """
    JSON encoding of the values that may end up in a playground document
    """

    # pylint: disable=too-many-return-statements,method-hidden
    def default(self, obj):
        """
        override the default json encoding
        :param obj: object to be encoded
        :return: encoded/serialized object
        """
        if isinstance(obj, datetime.timedelta):
            return str(obj)
        if isinstance(obj, (datetime.datetime, datetime.date, datetime.time)):
            return format_attribute_value(obj)
        if isinstance(obj, (set, frozenset)):
            return list(obj)
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, decimal.Decimal):
            return float(obj)
        if isinstance(obj, bytes):
            if obj == b"":
                return ""
            api_playground.log.debug("PlaygroundJSONEncoder: serializing bytes obj")
            return obj.hex()
        if hasattr(obj, "value") and isinstance(getattr(obj, "value"), (str, int)):
            # enum members
            return obj.value

        if not is_debug():
            api_playground.log.warning(f'JSON Encoding Error: Unknown object type "{type(obj)}" for {obj}')
            return {"error": "PlaygroundJSONEncoder invalid object"}
        return str(obj)
