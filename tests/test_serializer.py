import datetime
import decimal
import enum
import json
import uuid
from types import SimpleNamespace

from api_playground.json_encoder import PlaygroundJSONEncoder
from api_playground.registry import PlaygroundRegistry
from api_playground.serializer import format_attribute_value, record_id, serialize

CREATED = datetime.datetime(2024, 3, 21, 14, 30, 0)


def _config(**options):
    return PlaygroundRegistry().register("recipe", **options)


def _recipe(**kwargs):
    values = dict(id=1, title="Spaghetti Carbonara", body="Eggs and cheese", created_at=CREATED, updated_at=CREATED)
    values.update(kwargs)
    return SimpleNamespace(**values)


def test_serialize_flat_attributes() -> None:
    result = serialize(_recipe(), _config(attributes=["title", "body"]))
    assert result == {
        "id": "1",
        "type": "recipes",
        "attributes": {"title": "Spaghetti Carbonara", "body": "Eggs and cheese"},
    }


def test_serialize_grouped_attributes() -> None:
    config = _config(attributes=["title", {"details": ["body"]}, {"timestamps": ["created_at", "updated_at"]}])
    attributes = serialize(_recipe(), config)["attributes"]
    assert attributes == {
        "title": "Spaghetti Carbonara",
        "details": {"body": "Eggs and cheese"},
        "timestamps": {"created_at": "2024-03-21T14:30:00", "updated_at": "2024-03-21T14:30:00"},
    }


def test_missing_attribute_is_reported() -> None:
    config = _config(attributes=["title", "missing", {"extra": ["other"]}])
    attributes = serialize(_recipe(), config)["attributes"]
    assert attributes["title"] == "Spaghetti Carbonara"
    assert "missing" not in attributes
    assert "extra" not in attributes
    assert attributes["_errors"] == [
        {"attribute": "missing", "message": "Attribute 'missing' not found on SimpleNamespace"},
        {"attribute": "extra.other", "message": "Attribute 'other' not found on SimpleNamespace"},
    ]


def test_no_relationships_member_without_relationships() -> None:
    assert "relationships" not in serialize(_recipe(), _config(attributes=["title"]))


def test_serialize_relationships() -> None:
    author = SimpleNamespace(id=7)
    categories = [SimpleNamespace(id=1), SimpleNamespace(id=2)]
    config = _config(attributes=["title"], relationships=["author", "categories", "editor"])
    record = _recipe(author=author, categories=categories, editor=None)
    assert serialize(record, config)["relationships"] == {
        "author": {"data": {"id": "7", "type": "author"}},
        "categories": {"data": [{"id": "1", "type": "categories"}, {"id": "2", "type": "categories"}]},
        "editor": {"data": None},
    }


def test_missing_relationship_is_null() -> None:
    config = _config(relationships=["author"])
    assert serialize(_recipe(), config)["relationships"] == {"author": {"data": None}}


def test_record_id() -> None:
    assert record_id(SimpleNamespace(id=42)) == "42"


def test_format_attribute_value() -> None:
    utc = datetime.datetime(2024, 3, 21, 14, 30, 5, 123, tzinfo=datetime.timezone.utc)
    assert format_attribute_value(utc) == "2024-03-21T14:30:05Z"
    assert format_attribute_value(CREATED) == "2024-03-21T14:30:00"
    assert format_attribute_value(datetime.date(2024, 3, 21)) == "2024-03-21"
    assert format_attribute_value("text") == "text"
    assert format_attribute_value(None) is None


class _Color(enum.Enum):
    RED = "red"


def test_json_encoder() -> None:
    value = {
        "decimal": decimal.Decimal("1.5"),
        "uuid": uuid.UUID("12345678123456781234567812345678"),
        "delta": datetime.timedelta(minutes=5),
        "tags": {"soup"},
        "color": _Color.RED,
        "raw": b"\x01\x02",
        "date": datetime.date(2024, 3, 21),
    }
    assert json.loads(json.dumps(value, cls=PlaygroundJSONEncoder)) == {
        "decimal": 1.5,
        "uuid": "12345678-1234-5678-1234-567812345678",
        "delta": "0:05:00",
        "tags": ["soup"],
        "color": "red",
        "raw": "0102",
        "date": "2024-03-21",
    }
