from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

Receiver = Callable[..., Any]


class Signal:
    """A named list of callbacks.

    Lets the transport layer announce things ("session invalidated") without
    knowing who reacts. Receivers run synchronously in connection order; one
    failing receiver is logged and does not stop the rest.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._receivers: list[Receiver] = []

    def connect(self, receiver: Receiver) -> Receiver:
        if receiver not in self._receivers:
            self._receivers.append(receiver)
        return receiver

    def disconnect(self, receiver: Receiver) -> None:
        if receiver in self._receivers:
            self._receivers.remove(receiver)

    def send(self, **payload: Any) -> None:
        for receiver in list(self._receivers):
            try:
                receiver(**payload)
            except Exception:
                logger.exception("Receiver %r for signal %s failed", receiver, self.name)

    def __len__(self) -> int:
        return len(self._receivers)

    def __repr__(self) -> str:
        return f"<Signal {self.name} receivers={len(self._receivers)}>"
