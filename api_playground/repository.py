"""
SQLAlchemy storage for playground models

The dispatcher only talks to the repository interface:
    find_by_id, all, where, count, save, update, destroy
so other storage backends can be plugged in by passing a `repository` at registration.
"""
# pylint: disable=logging-format-interpolation,protected-access
import datetime
import decimal
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Tuple
import sqlalchemy
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
import api_playground
from .model_config import FilterType

PK_DELIMITER = "_"
MAX_SQL_INTEGER = 2**63 - 1
TRUE_VALUES = ("true", "t", "1", "yes", "on")
FALSE_VALUES = ("false", "f", "0", "no", "off")
BLANK = "can't be blank"
INVALID = "is invalid"


@dataclass
class SaveResult:
    """
    Outcome of a save/update: the record and the (attribute, message) validation errors
    """

    record: Any
    errors: list = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _python_type(column) -> Optional[type]:
    try:
        return column.type.python_type
    except (NotImplementedError, AttributeError):
        return None


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in TRUE_VALUES:
            return True
        if normalized in FALSE_VALUES:
            return False
    raise ValueError(f"Not a boolean value: {value!r}")


def _to_int(value: Any) -> int:
    if isinstance(value, str):
        value = int(value.strip())
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Not an integer value: {value!r}")
        value = int(value)
    elif not isinstance(value, int):
        raise ValueError(f"Not an integer value: {value!r}")
    if abs(value) > MAX_SQL_INTEGER:
        raise ValueError(f"Integer value out of range: {value}")
    return value


def _to_datetime(value: Any) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    if isinstance(value, str):
        value = value.strip()
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.datetime.fromisoformat(value)
    raise ValueError(f"Not a datetime value: {value!r}")


def _to_date(value: Any) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        return datetime.date.fromisoformat(value.strip())
    raise ValueError(f"Not a date value: {value!r}")


def convert_value(column, value: Any) -> Any:
    """
    Convert a value to the python type of the column, e.g. the ISO-8601 string of a datetime
    :raises ValueError: when the value can't be stored in the column
    """
    if value is None:
        return None
    python_type = _python_type(column)
    try:
        if python_type is bool:
            return _to_bool(value)
        if python_type is int:
            return _to_int(value)
        if python_type in (float, decimal.Decimal):
            if isinstance(value, bool):
                raise ValueError(f"Not a number: {value!r}")
            return python_type(value)
        if python_type is datetime.datetime:
            return _to_datetime(value)
        if python_type is datetime.date:
            return _to_date(value)
        if python_type is datetime.time and not isinstance(value, datetime.time):
            if not isinstance(value, str):
                raise ValueError(f"Not a time value: {value!r}")
            return datetime.time.fromisoformat(value.strip())
    except (TypeError, decimal.InvalidOperation) as exc:
        raise ValueError(str(exc)) from exc
    return value


def coerce_value(column, value: Any) -> Any:
    """
    Convert a query string value to the python type of the column
    Booleans are lenient: anything that isn't a true value is False
    :raises ValueError: when the value can't be converted, such a filter can't match any record
    """
    if not isinstance(value, str):
        return value
    if _python_type(column) is bool:
        return value.strip().lower() in TRUE_VALUES
    return convert_value(column, value)


def escape_like(value: str, escape: str = "\\") -> str:
    return value.replace(escape, escape * 2).replace("%", escape + "%").replace("_", escape + "_")


class SQLAlchemyRepository:
    """
    Storage accessor for a single SQLAlchemy model class
    """

    def __init__(self, model: type, db: Any = None) -> None:
        """
        :param model: SQLAlchemy declarative model class
        :param db: flask_sqlalchemy.SQLAlchemy instance, defaults to the playground db
        """
        self.model = model
        self._db = db

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.model.__name__}>"

    @property
    def db(self):
        return self._db or api_playground.Playground.db or api_playground.DB

    @property
    def session(self):
        return self.db.session

    @property
    def mapper(self):
        return sqlalchemy.inspect(self.model)

    @property
    def model_name(self) -> str:
        return self.model.__name__

    def has_field(self, name: str) -> bool:
        return hasattr(self.model, name)

    def is_relationship(self, name: str) -> bool:
        return name in self.mapper.relationships

    #
    # Lookup
    #
    def parse_id(self, record_id: Any) -> Optional[tuple]:
        """
        :param record_id: id as passed in the url, composite keys are joined with "_"
        :return: primary key tuple or None if the id can't be a valid primary key
        """
        pk_columns = self.mapper.primary_key
        raw_values = [record_id] if len(pk_columns) == 1 else str(record_id).split(PK_DELIMITER)
        if len(raw_values) != len(pk_columns):
            return None
        result = []
        for column, raw in zip(pk_columns, raw_values):
            python_type = _python_type(column)
            if python_type is int:
                try:
                    value = int(str(raw).strip())
                except ValueError:
                    return None
                if abs(value) > MAX_SQL_INTEGER:
                    return None
            elif python_type is not None and python_type is not str and not isinstance(raw, python_type):
                try:
                    value = python_type(raw)
                except (TypeError, ValueError):
                    return None
            else:
                value = raw
            result.append(value)
        return tuple(result)

    def eager_options(self, includes: Iterable[str]) -> list:
        """
        Load the configured relationships together with the records
        we can't set options for lazy 'dynamic'/'raise'/'noload' relationships
        """
        options = []
        for rel_name in includes or ():
            if not self.is_relationship(rel_name):
                continue
            relationship = self.mapper.relationships[rel_name]
            if relationship.lazy not in ("select", "joined", "subquery", "selectin"):
                continue
            options.append(selectinload(getattr(self.model, rel_name)))
        return options

    def find_by_id(self, record_id: Any, includes: Iterable[str] = ()) -> Optional[Any]:
        """
        :return: the record with the given id or None
        """
        primary_key = self.parse_id(record_id)
        if primary_key is None:
            api_playground.log.debug(f"Invalid {self.model_name} id {record_id!r}")
            return None
        if len(primary_key) == 1:
            primary_key = primary_key[0]
        return self.session.get(self.model, primary_key, options=self.eager_options(includes))

    #
    # Collections
    #
    def filter_query(self, query, predicates: Iterable) -> sqlalchemy.orm.Query:
        """
        Apply the planned predicates to the query, all predicates are combined with AND
        """
        expressions = []
        for predicate in predicates:
            if predicate.field not in self.mapper.column_attrs:
                api_playground.log.warning(f"'{self.model_name}.{predicate.field}' is not a column, filter skipped")
                continue
            attr = getattr(self.model, predicate.field)
            if predicate.type == FilterType.PARTIAL:
                pattern = f"%{escape_like(str(predicate.value).lower())}%"
                expressions.append(func.lower(attr).like(pattern, escape="\\"))
            else:
                column = self.mapper.column_attrs[predicate.field].columns[0]
                try:
                    expressions.append(attr == coerce_value(column, predicate.value))
                except ValueError as exc:
                    api_playground.log.debug(f"'{self.model_name}.{predicate.field}' can't match {predicate.value!r}: {exc}")
                    expressions.append(sqlalchemy.false())
        if expressions:
            query = query.filter(*expressions)
        return query

    def query(self, predicates: Iterable = (), includes: Iterable[str] = ()):
        query = self.session.query(self.model)
        options = self.eager_options(includes)
        if options:
            query = query.options(*options)
        return self.filter_query(query, predicates)

    def where(self, predicates: Iterable = (), includes: Iterable[str] = (), offset: int = None, limit: int = None) -> list:
        """
        :return: the records matching all predicates, ordered by primary key
        """
        if offset and offset > MAX_SQL_INTEGER:
            # no record can be this far in the collection
            return []
        query = self.query(predicates, includes).order_by(*self.mapper.primary_key)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def all(self, includes: Iterable[str] = ()) -> list:
        return self.where((), includes)

    def count(self, predicates: Iterable = ()) -> int:
        return self.filter_query(self.session.query(self.model), predicates).order_by(None).count()

    #
    # Writes
    #
    def assignable(self, attributes: dict) -> Tuple[dict, list]:
        """
        :return: (attributes converted to the column types, (attribute, message) errors for the values that can't be converted)
        """
        result = {}
        errors = []
        for attr_name, value in attributes.items():
            if not self.has_field(attr_name):
                api_playground.log.warning(f"{self.model_name} has no attribute {attr_name}, ignoring it")
                continue
            if attr_name in self.mapper.column_attrs:
                column = self.mapper.column_attrs[attr_name].columns[0]
                try:
                    value = convert_value(column, value)
                except ValueError as exc:
                    api_playground.log.debug(f"Invalid value for {self.model_name}.{attr_name}: {exc}")
                    errors.append((attr_name, INVALID))
                    continue
            result[attr_name] = value
        return result, errors

    def validate(self, record: Any, skip: Iterable[str] = ()) -> list:
        """
        :param skip: attributes that already have an error
        :return: list of (attribute, message) tuples
        Non-nullable columns without a default may not be blank,
        models can add their own errors with a `_s_validate` method returning {attribute: [messages]}
        """
        errors = []
        for column_attr in self.mapper.column_attrs:
            column = column_attr.columns[0]
            if column_attr.key in skip:
                continue
            if getattr(column, "primary_key", False) or getattr(column, "nullable", True):
                continue
            if getattr(column, "default", None) is not None or getattr(column, "server_default", None) is not None:
                continue
            if is_blank(getattr(record, column_attr.key, None)):
                errors.append((column_attr.key, BLANK))

        custom_validation = getattr(record, "_s_validate", None)
        if callable(custom_validation):
            for attr_name, messages in (custom_validation() or {}).items():
                if isinstance(messages, str):
                    messages = [messages]
                for message in messages:
                    if (attr_name, message) not in errors:
                        errors.append((attr_name, message))
        return errors

    def save(self, attributes: dict) -> SaveResult:
        """
        Create a new record, it is only added to the session when it is valid
        """
        attributes, errors = self.assignable(attributes)
        record = self.model(**attributes)
        errors += self.validate(record, skip=[attr_name for attr_name, _ in errors])
        if errors:
            if record in self.session:
                self.session.expunge(record)
            return SaveResult(record, errors)
        self.session.add(record)
        self.session.flush()
        return SaveResult(record)

    def update(self, record: Any, attributes: dict) -> SaveResult:
        """
        Update the record, the pending changes are discarded when the record is invalid
        """
        attributes, errors = self.assignable(attributes)
        for attr_name, value in attributes.items():
            setattr(record, attr_name, value)
        errors += self.validate(record, skip=[attr_name for attr_name, _ in errors])
        if errors:
            if attributes:
                self.session.expire(record, list(attributes))
            return SaveResult(record, errors)
        self.session.flush()
        return SaveResult(record)

    def destroy(self, record: Any) -> bool:
        """
        :return: False if the record could not be removed:
            the model `_s_before_destroy` method returned False or a constraint prevented the delete
        """
        before_destroy = getattr(record, "_s_before_destroy", None)
        if callable(before_destroy) and before_destroy() is False:
            api_playground.log.info(f"Deletion of {record} aborted by {self.model_name}._s_before_destroy")
            return False
        try:
            self.session.delete(record)
            self.session.flush()
        except IntegrityError as exc:
            api_playground.log.warning(f"Failed to delete {record}: {exc}")
            self.session.rollback()
            return False
        return True
