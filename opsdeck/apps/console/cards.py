from __future__ import annotations

from collections.abc import Sized
from enum import Enum
from typing import Any

from opsdeck.core.errors import ApiError
from opsdeck.services.query import QueryObserver


class CardState(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    READY = "ready"


def card_state(observer: QueryObserver[Any]) -> CardState:
    # Data wins over a later refetch error; the last good value stays on screen.
    data = observer.data
    if data is None:
        if observer.is_error:
            return CardState.ERROR
        if observer.is_loading or observer.is_fetching:
            return CardState.LOADING
        return CardState.EMPTY
    if isinstance(data, Sized) and not isinstance(data, str) and len(data) == 0:
        return CardState.EMPTY
    return CardState.READY


def error_message(error: BaseException | None, fallback: str = "Failed to load data") -> str:
    if error is None:
        return fallback
    if isinstance(error, ApiError):
        return error.message or fallback
    return str(error) or fallback
