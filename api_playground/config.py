# Configuration settings can be set in app.config
# The get_config function falls back to the Playground class defaults and the environment
import os
import logging
from flask import current_app
import api_playground
from typing import Any, Optional


def get_config(option: str, default: Any = None) -> Optional[Any]:
    """Retrieve a configuration parameter
    The lookup order is: flask app config, Playground class attribute, environment
    :param option: configuration parameter
    :param default: value returned when the option isn't set anywhere
    :return: configuration value
    """

    try:
        result = current_app.config[option]
    except (KeyError, RuntimeError):
        # RuntimeError: working outside of app context
        result = getattr(api_playground.Playground, option, None)
        if result is None:
            result = os.environ.get(option, None)
    if result is None:
        return default
    return result


def is_debug() -> bool:
    """
    We use the loglevel to check whether we're running in debug mode
    :return: whether the app is in debug mode
    :rtype: Boolean
    """
    return api_playground.log.getEffectiveLevel() < logging.INFO
