"""Non-fatal, dismissable user notifications (toasts)."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ToastType(str, Enum):
    ERROR   = "error"
    SUCCESS = "success"
    INFO    = "info"


class ToastMessage(BaseModel):
    type:    ToastType
    message: str


class ToastChannel:
    """Holds at most one visible toast; listeners are told about every change."""

    def __init__(self) -> None:
        self._current: ToastMessage | None = None
        self._listeners: list[Callable[[ToastMessage | None], None]] = []

    @property
    def current(self) -> ToastMessage | None:
        return self._current

    def show(self, message: str, type: ToastType = ToastType.ERROR) -> ToastMessage:
        toast = ToastMessage(type=type, message=message)
        self._set(toast)
        return toast

    def dismiss(self) -> None:
        self._set(None)

    def subscribe(self, listener: Callable[[ToastMessage | None], None]) -> None:
        self._listeners.append(listener)

    def _set(self, toast: ToastMessage | None) -> None:
        self._current = toast
        if toast is not None:
            logger.log(
                logging.WARNING if toast.type is ToastType.ERROR else logging.INFO,
                "Toast [%s] %s", toast.type.value, toast.message,
            )
        for listener in self._listeners:
            listener(toast)
