import datetime

import pytest

from api_playground import DB as db
from api_playground.jsonapi_filters import Predicate
from api_playground.model_config import FilterType
from api_playground.repository import (
    BLANK,
    INVALID,
    MAX_SQL_INTEGER,
    SQLAlchemyRepository,
    coerce_value,
    convert_value,
    escape_like,
)
from api_playground.serializer import record_id
from conftest import Author, Rating, Recipe, reload


@pytest.fixture
def repository(app):
    return SQLAlchemyRepository(Recipe, db=db)


def test_parse_id(repository) -> None:
    assert repository.parse_id("12") == (12,)
    assert repository.parse_id(12) == (12,)
    assert repository.parse_id("abc") is None
    assert repository.parse_id(str(2**63)) is None


def test_composite_id(app, recipes) -> None:
    author = Author(name="Marcella Hazan")
    db.session.add(author)
    db.session.flush()
    rating = Rating(recipe_id=recipes[1].id, author_id=author.id, score=4)
    db.session.add(rating)
    db.session.commit()

    repository = SQLAlchemyRepository(Rating, db=db)
    assert repository.parse_id("1_2") == (1, 2)
    assert repository.parse_id("1") is None
    assert repository.parse_id("1_x") is None
    assert repository.find_by_id(f"{recipes[1].id}_{author.id}") is rating
    assert record_id(rating) == f"{recipes[1].id}_{author.id}"


def test_find_by_id(repository, recipes) -> None:
    assert repository.find_by_id(str(recipes[2].id)) is recipes[2]
    assert repository.find_by_id("999") is None
    assert repository.find_by_id("abc") is None


def test_where(repository, recipes) -> None:
    assert repository.where() == recipes
    assert repository.where(offset=1, limit=2) == recipes[1:3]
    assert repository.all() == recipes
    assert repository.count() == 5


def test_where_with_predicates(repository, recipes) -> None:
    recipes[4].locked = True
    db.session.commit()
    assert repository.where([Predicate("title", FilterType.PARTIAL, "CH")]) == [recipes[1], recipes[4]]
    predicates = [Predicate("title", FilterType.PARTIAL, "CH"), Predicate("locked", FilterType.EXACT, "false")]
    assert repository.where(predicates) == [recipes[1]]
    assert repository.count(predicates) == 1


def test_filter_on_unknown_column_is_skipped(repository, recipes) -> None:
    assert repository.count([Predicate("author", FilterType.EXACT, "1"), Predicate("calories", FilterType.EXACT, "1")]) == 5


def test_eager_options(repository) -> None:
    assert len(repository.eager_options(["author", "categories", "title", "missing"])) == 2


def test_save(repository) -> None:
    result = repository.save({"title": "Soup", "body": "Boil water", "calories": 100})
    assert result.ok
    assert result.record.id is not None
    assert result.record in db.session


def test_save_invalid(repository) -> None:
    result = repository.save({"title": "  "})
    assert not result.ok
    assert result.errors == [("title", BLANK), ("body", BLANK)]
    assert result.record not in db.session


def test_update(repository, recipe) -> None:
    result = repository.update(recipe, {"title": "Carbonara"})
    assert result.ok
    assert recipe.title == "Carbonara"


def test_update_invalid_discards_changes(repository, recipe) -> None:
    title = recipe.title
    result = repository.update(recipe, {"title": "x" * 101})
    assert result.errors == [("title", "is too long (maximum is 100 characters)")]
    assert recipe.title == title


def test_destroy(repository, recipe) -> None:
    assert repository.destroy(recipe)
    db.session.commit()
    assert db.session.query(Recipe).count() == 4


def test_destroy_aborted_by_the_model(repository, recipe) -> None:
    recipe.locked = True
    assert repository.destroy(recipe) is False
    assert recipe in db.session


def test_validation_without_hooks(app) -> None:
    repository = SQLAlchemyRepository(Author, db=db)
    assert repository.validate(Author(name="")) == [("name", BLANK)]
    assert repository.validate(Author(name="Marcella")) == []


@pytest.mark.parametrize(
    "column, value, expected",
    [
        (Recipe.__table__.c.locked, "true", True),
        (Recipe.__table__.c.locked, "0", False),
        (Recipe.__table__.c.locked, "maybe", False),
        (Recipe.__table__.c.id, "42", 42),
        (Recipe.__table__.c.title, "42", "42"),
        (Recipe.__table__.c.created_at, "2024-03-21T14:30:00", datetime.datetime(2024, 3, 21, 14, 30)),
        (Recipe.__table__.c.id, 42, 42),
    ],
)
def test_coerce_value(column, value, expected) -> None:
    assert coerce_value(column, value) == expected


@pytest.mark.parametrize("column, value", [(Recipe.__table__.c.id, "4x"), (Recipe.__table__.c.author_id, "9" * 25)])
def test_coerce_value_fails(column, value) -> None:
    with pytest.raises(ValueError):
        coerce_value(column, value)


@pytest.mark.parametrize(
    "column, value, expected",
    [
        (Recipe.__table__.c.locked, "yes", True),
        (Recipe.__table__.c.locked, "off", False),
        (Recipe.__table__.c.locked, 1, True),
        (Recipe.__table__.c.locked, False, False),
        (Recipe.__table__.c.author_id, "7", 7),
        (Recipe.__table__.c.author_id, 7.0, 7),
        (Recipe.__table__.c.created_at, "2024-03-21T14:30:00", datetime.datetime(2024, 3, 21, 14, 30)),
        (Recipe.__table__.c.created_at, None, None),
        (Recipe.__table__.c.title, "Soup", "Soup"),
    ],
)
def test_convert_value(column, value, expected) -> None:
    assert convert_value(column, value) == expected


@pytest.mark.parametrize(
    "column, value",
    [
        (Recipe.__table__.c.locked, "maybe"),
        (Recipe.__table__.c.locked, 2),
        (Recipe.__table__.c.author_id, "seven"),
        (Recipe.__table__.c.author_id, 7.5),
        (Recipe.__table__.c.author_id, 2**63),
        (Recipe.__table__.c.created_at, "yesterday"),
        (Recipe.__table__.c.created_at, 20240321),
    ],
)
def test_convert_value_fails(column, value) -> None:
    with pytest.raises(ValueError):
        convert_value(column, value)


def test_save_converts_values(repository) -> None:
    result = repository.save({"title": "Soup", "body": "Boil water", "locked": "yes", "created_at": "2024-03-21T14:30:00"})
    assert result.ok
    db.session.commit()
    recipe = reload(Recipe, result.record.id)
    assert recipe.locked is True
    assert recipe.created_at == datetime.datetime(2024, 3, 21, 14, 30)


def test_save_invalid_values(repository) -> None:
    result = repository.save({"title": "Soup", "body": "Boil water", "locked": "maybe", "created_at": "yesterday"})
    assert result.errors == [("locked", INVALID), ("created_at", INVALID)]
    assert result.record not in db.session


def test_update_invalid_value_discards_changes(repository, recipe) -> None:
    title = recipe.title
    result = repository.update(recipe, {"title": "Carbonara", "author_id": "9" * 25})
    assert result.errors == [("author_id", INVALID)]
    assert recipe.title == title


def test_exact_filter_that_cant_match(repository, recipes) -> None:
    assert repository.where([Predicate("author_id", FilterType.EXACT, "9" * 25)]) == []
    assert repository.count([Predicate("id", FilterType.EXACT, "4x")]) == 0
    assert repository.count([Predicate("created_at", FilterType.EXACT, "yesterday")]) == 0


def test_where_beyond_the_sql_integer_range(repository, recipes) -> None:
    assert repository.where(offset=MAX_SQL_INTEGER + 1, limit=15) == []
    assert repository.count() == 5


def test_escape_like() -> None:
    assert escape_like("100%_off\\") == "100\\%\\_off\\\\"


def test_convert_utc_timestamp() -> None:
    value = convert_value(Recipe.__table__.c.created_at, "2024-03-21T14:30:00Z")
    assert value == datetime.datetime(2024, 3, 21, 14, 30, tzinfo=datetime.timezone.utc)
