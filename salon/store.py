# salon/store.py
"""
Record storage.

Every entity goes through the same six operations (fetch_all, fetch_by_id,
create, update, delete, query). ``SQLRecordStore`` runs them against a
SQLModel session; ``MemoryRecordStore`` keeps records in dicts and is used
wherever a database is not wanted.

Filters follow the ``{"field": value}`` / ``{"field": [op, value]}`` shape.
"""

import logging
import operator
import re
from contextlib import contextmanager
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import exc
from sqlmodel import Session, SQLModel, select

from salon.errors import DuplicateRecord, NotFound, StoreTimeout, ValidationError

logger = logging.getLogger(__name__)


def _contains(value, needle) -> bool:
    return value is not None and str(needle).lower() in str(value).lower()


OPERATORS = {
    "=": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": lambda value, options: value in options,
    "not in": lambda value, options: value not in options,
    "like": _contains,
}


def _snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def normalize_record(record: Mapping) -> dict:
    """
    Map incoming field names onto the canonical schema.

    ``name_c`` (current scheme) wins over ``name`` (legacy scheme),
    camelCase keys become snake_case, and linked records given as
    ``{"Id": 3}`` collapse to their id.
    """
    legacy, current = {}, {}
    for key, value in record.items():
        if isinstance(value, Mapping) and "Id" in value:
            value = value["Id"]
        if key.endswith("_c"):
            current[_snake(key[:-2])] = value
        else:
            legacy[_snake(key)] = value
    legacy.update(current)
    return legacy


def _parse_filter(field: str, condition):
    if isinstance(condition, (list, tuple)) and len(condition) == 2 and condition[0] in OPERATORS:
        return field, condition[0], condition[1]
    return field, "=", condition


def _check_fields(entity, names: Iterable[str]) -> None:
    unknown = sorted(set(names) - set(entity.model_fields))
    if unknown:
        raise ValidationError(f"Unknown {entity.__name__} field(s): {', '.join(unknown)}")


def _project(entity, record, fields: Optional[Sequence[str]]):
    if fields is None:
        return record
    return {name: getattr(record, name) for name in fields}


def _validate(entity, data: Mapping):
    try:
        return entity.model_validate(dict(data))
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(f"Invalid {entity.__name__}: {problems}")


class RecordStore:
    """Interface shared by the stores."""

    def fetch_all(self, entity, fields: Optional[Sequence[str]] = None) -> List:
        return self.query(entity, fields)

    def fetch_by_id(self, entity, record_id: int, fields: Optional[Sequence[str]] = None):
        raise NotImplementedError

    def create(self, entity, record: Mapping):
        raise NotImplementedError

    def update(self, entity, record_id: int, record: Mapping):
        raise NotImplementedError

    def delete(self, entity, ids: Iterable[int]) -> Dict[int, bool]:
        raise NotImplementedError

    def query(self, entity, fields: Optional[Sequence[str]] = None, filters: Optional[Mapping] = None) -> List:
        raise NotImplementedError

    def _prepare(self, entity, record: Mapping) -> dict:
        data = normalize_record(record)
        data.pop("id", None)
        _check_fields(entity, data)
        return data


class SQLRecordStore(RecordStore):
    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _guard(self, entity):
        try:
            yield
        except exc.IntegrityError as e:
            self.session.rollback()
            logger.warning(f"Integrity error on {entity.__name__}: {e.orig}")
            raise DuplicateRecord(f"{entity.__name__} conflicts with an existing record")
        except exc.TimeoutError:
            self.session.rollback()
            logger.error(f"Timed out waiting for a connection ({entity.__name__})")
            raise StoreTimeout(f"Timed out accessing {entity.__name__} records")
        except exc.OperationalError as e:
            self.session.rollback()
            message = str(e.orig).lower()
            if "locked" in message or "timeout" in message:
                logger.error(f"Store timeout on {entity.__name__}: {e.orig}")
                raise StoreTimeout(f"Timed out accessing {entity.__name__} records")
            raise

    def _get(self, entity, record_id: int):
        record = self.session.get(entity, record_id)
        if record is None:
            raise NotFound(f"{entity.__name__} {record_id} not found")
        return record

    def fetch_by_id(self, entity, record_id, fields=None):
        with self._guard(entity):
            return _project(entity, self._get(entity, record_id), fields)

    def create(self, entity, record):
        data = self._prepare(entity, record)
        db_record = _validate(entity, data)
        with self._guard(entity):
            self.session.add(db_record)
            self.session.commit()
            self.session.refresh(db_record)  # fills db_record.id
        return db_record

    def update(self, entity, record_id, record):
        changes = self._prepare(entity, record)
        with self._guard(entity):
            db_record = self._get(entity, record_id)
            merged = db_record.model_dump()
            merged.update(changes)
            validated = _validate(entity, merged)
            for name in changes:
                setattr(db_record, name, getattr(validated, name))
            self.session.add(db_record)
            self.session.commit()
            self.session.refresh(db_record)
        return db_record

    def delete(self, entity, ids):
        results = {}
        with self._guard(entity):
            for record_id in ids:
                db_record = self.session.get(entity, record_id)
                if db_record is None:
                    results[record_id] = False
                    continue
                self.session.delete(db_record)
                results[record_id] = True
            self.session.commit()
        return results

    def query(self, entity, fields=None, filters=None):
        if fields is not None:
            _check_fields(entity, fields)
        stmt = select(entity)
        for field, op, value in (_parse_filter(f, c) for f, c in (filters or {}).items()):
            _check_fields(entity, [field])
            column = getattr(entity, field)
            if op == "in":
                stmt = stmt.where(column.in_(list(value)))
            elif op == "not in":
                stmt = stmt.where(column.not_in(list(value)))
            elif op == "like":
                stmt = stmt.where(column.ilike(f"%{value}%"))
            else:
                stmt = stmt.where(OPERATORS[op](column, value))
        stmt = stmt.order_by(entity.id)

        with self._guard(entity):
            records = self.session.exec(stmt).all()
        return [_project(entity, r, fields) for r in records]


class MemoryRecordStore(RecordStore):
    """In-process store with the same contract; ids count up per entity."""

    def __init__(self):
        self._tables: Dict[type, Dict[int, SQLModel]] = {}
        self._next_ids: Dict[type, int] = {}

    def _table(self, entity) -> Dict[int, SQLModel]:
        return self._tables.setdefault(entity, {})

    def _copy(self, entity, record):
        return entity.model_validate(record.model_dump())

    def fetch_by_id(self, entity, record_id, fields=None):
        record = self._table(entity).get(record_id)
        if record is None:
            raise NotFound(f"{entity.__name__} {record_id} not found")
        return _project(entity, self._copy(entity, record), fields)

    def create(self, entity, record):
        data = self._prepare(entity, record)
        new_id = self._next_ids.get(entity, 1)
        self._next_ids[entity] = new_id + 1
        data["id"] = new_id
        stored = _validate(entity, data)
        self._table(entity)[new_id] = stored
        return self._copy(entity, stored)

    def update(self, entity, record_id, record):
        changes = self._prepare(entity, record)
        table = self._table(entity)
        if record_id not in table:
            raise NotFound(f"{entity.__name__} {record_id} not found")
        merged = table[record_id].model_dump()
        merged.update(changes)
        table[record_id] = _validate(entity, merged)
        return self._copy(entity, table[record_id])

    def delete(self, entity, ids):
        table = self._table(entity)
        return {record_id: table.pop(record_id, None) is not None for record_id in ids}

    def query(self, entity, fields=None, filters=None):
        if fields is not None:
            _check_fields(entity, fields)
        conditions = [_parse_filter(f, c) for f, c in (filters or {}).items()]
        _check_fields(entity, [field for field, _, _ in conditions])

        matches = []
        for record_id in sorted(self._table(entity)):
            record = self._table(entity)[record_id]
            if all(OPERATORS[op](getattr(record, field), value) for field, op, value in conditions):
                matches.append(_project(entity, self._copy(entity, record), fields))
        return matches
