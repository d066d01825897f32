import logging
import os
import sys
from flask_sqlalchemy import SQLAlchemy
from typing import Any, Dict


class Playground:
    """Process-wide playground settings
    The settings are stored as class variables, they can be overridden with
    `Playground.configure(...)` or with the Flask app config (cfr. config.get_config)
    """

    # Configuration settings are stored as class variables
    DEFAULT_PAGE_SIZE = 15
    MIN_PAGE_SIZE = 1
    MAX_PAGE_SIZE = 50
    DEFAULT_PREFIX = "/api/playground"
    API_KEY_HEADER = "X-API-Key"
    API_KEY_EXPIRATION_DAYS = 5
    API_KEY_TOKEN_LENGTH = 24
    API_KEY_MAX_ATTEMPTS = 10
    DOCS_TITLE = "API Playground"
    DOCS_VERSION = "1.0.0"
    DOCS_DESCRIPTION = "Interactive API documentation for playground endpoints"
    LOGLEVEL = logging.WARNING
    #
    db = None

    @classmethod
    def configure(cls, **options: Any) -> None:
        """
        Override the class level settings, e.g.
        Playground.configure(API_KEY_HEADER="X-Token", DEFAULT_PAGE_SIZE=20)
        """
        for conf_name, conf_val in options.items():
            if not hasattr(cls, conf_name):
                log.warning(f"Unknown playground setting {conf_name}")
            setattr(cls, conf_name, conf_val)

    @staticmethod
    def init_logging(loglevel: int = logging.WARNING) -> logging.Logger:
        """
        Specify the log format used in the webserver logs
        The webserver will catch stdout so we redirect eveything to sys.stderr
        """
        log = logging.getLogger(__name__.rsplit(".", 1)[0])
        if log.level == logging.NOTSET:
            handler = logging.StreamHandler(sys.stderr)
            formatter = logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s")
            handler.setFormatter(formatter)
            log.setLevel(loglevel)
            log.addHandler(handler)
        return log


def dict_merge(dct: Dict[str, Any], merge_dct: Dict[str, Any]) -> None:
    """Recursive dict merge used for customizing the generated openapi spec.
    Inspired by :meth:``dict.update()``, instead of updating only
    top-level keys, dict_merge recurses down into dicts nested
    to an arbitrary depth, updating keys. The ``merge_dct`` is merged into ``dct``.
    :param dct: dict onto which the merge is executed
    :param merge_dct: dct merged into dct
    :return: None
    """
    for k in merge_dct:
        if k in dct and isinstance(dct[k], dict) and isinstance(merge_dct[k], dict):
            dict_merge(dct[k], merge_dct[k])
        else:
            # convert to string, for ex. http return codes
            dct[str(k)] = merge_dct[k]


#
# DB and logging initialization
#
DB = SQLAlchemy()

try:
    DEBUG = os.getenv("DEBUG", logging.WARNING)
    LOGLEVEL = int(DEBUG)
except ValueError:  # pragma: no cover
    print(f'Invalid LogLevel in DEBUG Environment Variable! "{DEBUG}"')
    LOGLEVEL = logging.INFO

log = Playground.init_logging(LOGLEVEL)
