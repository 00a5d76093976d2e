"""Helpers for calling persistence adapters from services."""

import logging
from collections.abc import Callable
from typing import TypeVar

from nutrition_ledger.domain.errors import LedgerError, UpstreamFailure

_logger = logging.getLogger(__name__)

T = TypeVar("T")


def persist(action: str, func: Callable[[], T]) -> T:
    """Run a repository call, surfacing storage errors as UpstreamFailure.

    Failures are not retried.
    """
    try:
        return func()
    except LedgerError:
        raise
    except Exception as exc:
        _logger.exception("Persistence failed: %s", action)
        raise UpstreamFailure(f"Failed to {action}") from exc
