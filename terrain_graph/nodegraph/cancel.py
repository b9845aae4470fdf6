# terrain_graph/nodegraph/cancel.py
from __future__ import annotations
import logging
import threading

from .errors import EvaluationCancelled

logger = logging.getLogger(__name__)


class CancelToken:
    """
    Флаг кооперативной отмены. Вызывающий (например, UI, получивший более
    новый снимок графа) вызывает cancel(), вычисление проверяет флаг между
    нодами и между пачками строк.
    """

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
        logger.warning("Evaluation cancellation requested.")

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise EvaluationCancelled("Evaluation was cancelled")
