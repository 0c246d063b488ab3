"""Explicit handle over the row-store.

Synopsis:
One ``Store`` is built by the application factory and handed to every
repository and to the ledger engine. Each logical operation borrows a pooled
connection through :meth:`Store.session` or :meth:`Store.unit_of_work` and
gives it back on every exit path.

Glossary:
- Unit of work: session whose writes commit together or not at all.
- Store failure: any unexpected SQLAlchemy error, surfaced as ``StoreFailure``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from flask import Flask, current_app
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .errors import LedgerError, StoreFailure, ValidationError

logger = logging.getLogger(__name__)

EXTENSION_KEY = "stockledger"


class Store:
    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)
        self._closed = False

    @classmethod
    def from_app(cls, app: Flask | None = None) -> "Store":
        target = app or current_app
        return target.extensions[EXTENSION_KEY]

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Session for pure reads; closed (connection released) on exit."""
        session = self._session_factory()
        try:
            yield session
        except LedgerError:
            raise
        except SQLAlchemyError as exc:
            logger.error("Store read failed: %s", exc)
            raise StoreFailure("Inventory store is unavailable") from exc
        finally:
            session.close()

    @contextmanager
    def unit_of_work(self) -> Iterator[Session]:
        """Session whose work commits on normal exit and rolls back on any error."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except LedgerError:
            session.rollback()
            raise
        except IntegrityError as exc:
            session.rollback()
            logger.warning("Integrity violation rolled back: %s", exc.orig)
            raise ValidationError(_describe_integrity_error(exc)) from exc
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Unit of work failed and was rolled back: %s", exc)
            raise StoreFailure("Inventory store is unavailable") from exc
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    def ping(self) -> bool:
        with self.session() as session:
            session.execute(text("SELECT 1"))
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.engine.dispose()
        logger.info("Store connection pool disposed")


def _describe_integrity_error(exc: IntegrityError) -> str:
    detail = str(exc.orig).lower()
    if "sku" in detail:
        return "A product with this SKU already exists"
    if "categories.name" in detail or "categories_name" in detail:
        return "A category with this name already exists"
    if "foreign key" in detail:
        return "Referenced record does not exist"
    if "transaction_type" in detail or "ck_inventory_transactions_type" in detail:
        return "Invalid transaction type"
    return "Request violates a data integrity constraint"
