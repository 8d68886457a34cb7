from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from originate.errors import OriginateError, StorageFailure
from originate.extensions import db

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def commit_session(action: str, conflict: OriginateError | None = None) -> None:
    """Commit the unit of work, translating store errors into typed failures.

    ``conflict`` is raised instead of ``StorageFailure`` when a constraint
    rejects the write.
    """
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        if conflict is not None:
            raise conflict from exc
        logger.error("Integrity error while %s", action, exc_info=True)
        raise StorageFailure() from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Storage failure while %s", action, exc_info=True)
        raise StorageFailure() from exc


def transition_status(model: Any, row_id: int, expected: str, target: str, **values: Any) -> bool:
    """Move ``row_id`` from ``expected`` to ``target`` in one conditional update.

    Returns False, leaving the row untouched, when its status is no longer
    ``expected``.
    """
    stmt = (
        update(model)
        .where(model.id == row_id, model.status == expected)
        .values(status=target, updated_at=utcnow(), **values)
        .execution_options(synchronize_session=False)
    )
    try:
        result = db.session.execute(stmt)
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Storage failure updating %s %s", model.__tablename__, row_id, exc_info=True)
        raise StorageFailure() from exc

    if result.rowcount != 1:
        db.session.rollback()
        return False

    commit_session(f"moving {model.__tablename__} {row_id} to {target}")
    return True
