"""
Storage primitives shared by the services.

upsert_by_unique_key() is the one place that knows how to express an atomic
insert-or-update for the active database dialect.  Any one-to-one pair keyed
on a unique column (users.id, profiles.user_id) goes through it.
"""
import logging

from sqlalchemy import select

from campusconnect.extensions import db

log = logging.getLogger(__name__)


def _dialect_insert(model):
    """Return an INSERT construct that supports ON CONFLICT for this backend."""
    dialect = db.session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise NotImplementedError(f"upsert is not supported on {dialect!r}")
    return insert(model)


def upsert_by_unique_key(model, key: dict, values: dict, update_fields=None):
    """
    Insert a row or update the existing one in a single statement.

    key           – {column: value} of the unique key the conflict resolves on.
    values        – the remaining column values for the row.
    update_fields – names of the columns overwritten when the row exists
                    (defaults to every key in *values*).  An empty list turns
                    the statement into INSERT ... ON CONFLICT DO NOTHING.

    Adds to the current transaction but does NOT commit.  Returns the row as
    it exists after the statement, re-read from the database.
    """
    if update_fields is None:
        update_fields = list(values)

    stmt = _dialect_insert(model).values(**key, **values)
    if update_fields:
        stmt = stmt.on_conflict_do_update(
            index_elements=list(key),
            set_={name: stmt.excluded[name] for name in update_fields},
        )
    else:
        stmt = stmt.on_conflict_do_nothing(index_elements=list(key))
    db.session.execute(stmt)

    return db.session.execute(
        select(model)
        .filter_by(**key)
        .execution_options(populate_existing=True)
    ).scalar_one()
