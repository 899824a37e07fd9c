"""BaseService — abstract foundation for all listkeeper services.

Every service receives an open :class:`ListStore` at construction time.
The store owns transactions; services own translation of store errors
into :class:`ServiceResult` payloads.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from listkeeper.domain.errors import (
    EntryNotFoundError,
    EntryValidationError,
    MalformedInputError,
    TransportError,
    UniquenessViolation,
)
from listkeeper.services._helpers import describe_validation_error
from listkeeper.services.result import ServiceResult

if TYPE_CHECKING:
    from listkeeper.domain.resolver import DomainResolver
    from listkeeper.infrastructure.store import ListStore

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class EntryService(BaseService):
            def create_entry(self, ...) -> ServiceResult:
                entry_id = self._store.insert(...)
                ...
    """

    def __init__(self, store: ListStore) -> None:
        self._store = store

    @property
    def store(self) -> ListStore:
        return self._store

    @property
    def resolver(self) -> DomainResolver:
        return self._store.resolver

    @staticmethod
    def _error_result(op: str, exc: Exception, **detail: Any) -> ServiceResult:
        """Translate a store/domain exception into a failed ServiceResult."""
        match exc:
            case EntryValidationError():
                code = "VALIDATION_FAILED"
                if exc.pattern is not None:
                    detail.setdefault("pattern", exc.pattern)
            case ValidationError():
                code = "VALIDATION_FAILED"
            case UniquenessViolation():
                code = "DUPLICATE_ENTRY"
            case EntryNotFoundError():
                code = "NOT_FOUND"
                detail.setdefault("id", exc.entry_id)
            case MalformedInputError():
                code = "MALFORMED_INPUT"
            case TransportError():
                code = "TRANSPORT_ERROR"
            case ValueError():
                code = "VALIDATION_FAILED"
            case _:
                code = "STORE_FAILURE"
        if isinstance(exc, ValidationError | EntryValidationError):
            message = describe_validation_error(exc)
        else:
            message = str(exc)
        logger.debug("%s failed: %s (%s)", op, code, message)
        return ServiceResult.failure(op, code, message, detail=detail)
