"""
Module: rewards_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.
Architecture position: Kernel > Selectors.  May import from db/, models/,
    domain/ and exceptions.  Selectors NEVER create, modify, or delete data.

Invariants enforced:
    - Read-only access: selectors accept a Session from the caller but MUST NOT
      call session.add(), session.delete(), session.commit(), or session.flush().
    - DTO return convention: selectors return frozen dataclasses, not ORM
      instances.
    - Session ownership: the caller owns the session and its transaction scope.

Failure modes:
    - CatalogNotConfiguredError when the backing table or one of its columns
      does not exist (schema never created, or created by an older release).
      Distinct from "not found".
    - Every other OperationalError / ProgrammingError is re-raised as is.
"""

from abc import ABC
from contextlib import contextmanager
from typing import Generator, Generic, TypeVar

from sqlalchemy.exc import DBAPIError, OperationalError, ProgrammingError
from sqlalchemy.orm import Session

from rewards_kernel.db.base import Base
from rewards_kernel.exceptions import CatalogNotConfiguredError
from rewards_kernel.logging_config import get_logger

ModelType = TypeVar("ModelType", bound=Base)

logger = get_logger("selectors")


_SCHEMA_SQLSTATES = frozenset({"42P01", "42703"})  # undefined_table, undefined_column
_SCHEMA_MESSAGES = ("no such table", "no such column")


def is_schema_error(exc: DBAPIError) -> bool:
    """Whether a driver error means the table or column does not exist."""
    orig = exc.orig
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate in _SCHEMA_SQLSTATES:
        return True
    message = str(orig).lower()
    return any(marker in message for marker in _SCHEMA_MESSAGES)


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return DTOs.  They MUST NOT mutate any data.
    """

    collection: str = ""

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _reading(self) -> Generator[None, None, None]:
        """Translate a missing or outdated schema into CatalogNotConfiguredError.

        Any other store failure (locks, dropped connections, timeouts)
        propagates unchanged.
        """
        try:
            yield
        except (OperationalError, ProgrammingError) as exc:
            if not is_schema_error(exc):
                raise
            logger.error(
                "catalog_not_configured",
                extra={"collection": self.collection, "detail": str(exc.orig)},
            )
            raise CatalogNotConfiguredError(self.collection, str(exc.orig)) from exc
