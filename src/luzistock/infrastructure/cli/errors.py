"""Turns domain and infrastructure errors into CLI messages."""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable

import click

from luzistock.domain.exceptions import DomainException, PersistenceError

logger = logging.getLogger(__name__)

RETRY_MESSAGE = "The stock database is unavailable right now, please try again."


def cli_errors(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Business errors become their own message; store faults a generic retry."""

    @wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except DomainException as exc:
            raise click.ClickException(str(exc))
        except PersistenceError as exc:
            logger.error(f"{fn.__name__}: {exc}")
            raise click.ClickException(RETRY_MESSAGE)

    return wrapper
