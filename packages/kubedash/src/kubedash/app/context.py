"""Selection shared between the UI thread and the watcher."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "default"


@dataclass(frozen=True)
class Selection:
    context: str | None = None
    namespaces: tuple[str, ...] = field(default_factory=lambda: (DEFAULT_NAMESPACE,))


class SelectionContext:
    """Lock-guarded current kube context and namespaces.

    Readers take an immutable :class:`Selection` copy and release the lock
    right away, so nobody holds it across a subprocess call or a render.
    """

    def __init__(self, context: str | None = None, namespaces: list[str] | None = None) -> None:
        self._lock = threading.Lock()
        self._selection = Selection(context, tuple(namespaces or (DEFAULT_NAMESPACE,)))

    def snapshot(self) -> Selection:
        with self._lock:
            return self._selection

    def set_context(self, context: str | None) -> None:
        with self._lock:
            self._selection = replace(self._selection, context=context)
        logger.info("context set to %s", context)

    def set_namespaces(self, namespaces: list[str]) -> None:
        with self._lock:
            self._selection = replace(
                self._selection, namespaces=tuple(namespaces or (DEFAULT_NAMESPACE,))
            )
        logger.info("namespaces set to %s", ", ".join(namespaces) or DEFAULT_NAMESPACE)

    def describe(self) -> str:
        selection = self.snapshot()
        return f" Context: {selection.context or '(current)'}   Namespaces: {', '.join(selection.namespaces)}"
