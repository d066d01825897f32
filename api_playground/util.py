#
# Inflection and coercion helpers
#
import decimal
import re
import inflect
from typing import Any

_inflect = inflect.engine()

INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")
# values that may be written to a record from a request payload
SCALAR_TYPES = (str, int, float, bool, decimal.Decimal, type(None))


def singularize(word: str) -> str:
    """
    :param word: (possibly plural) model name, e.g. "recipes"
    :return: singular form, e.g. "recipe". Words that are already singular are returned as-is
    """
    word = str(word)
    if not word:
        return word
    return _inflect.singular_noun(word) or word


def pluralize(word: str) -> str:
    """
    :param word: singular model name, e.g. "recipe"
    :return: plural form, e.g. "recipes"
    """
    word = str(word)
    if not word:
        return word
    return _inflect.plural_noun(word)


def humanize(name: Any) -> str:
    """
    Format an attribute name for display to end users:
    "author_id" -> "Author", "cooking_time" -> "Cooking time"
    """
    result = str(name).lstrip("_")
    if result.endswith("_id") and len(result) > 3:
        result = result[:-3]
    result = result.replace("_", " ").lower()
    return result[:1].upper() + result[1:]


def camelize(name: Any) -> str:
    """
    "recipe_step" -> "RecipeStep"
    """
    return "".join(part[:1].upper() + part[1:] for part in str(name).split("_") if part)


def to_int(value: Any) -> int:
    """
    Lenient integer parsing of query string values:
    leading digits are used, anything else yields 0 ("2abc" => 2, "abc" => 0, None => 0)
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    match = INT_PREFIX_RE.match(str(value)) if value is not None else None
    if not match:
        return 0
    return int(match.group(1))


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(value, upper))


def is_scalar(value: Any) -> bool:
    """
    :return: True if the value is a scalar that may be assigned to a record attribute
    """
    return isinstance(value, SCALAR_TYPES)
