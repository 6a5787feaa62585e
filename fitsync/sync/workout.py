"""Chronomètre de séance d'entraînement.

Transitions : ``IDLE -> RUNNING -> SUBMITTING -> IDLE``. Un échec de
soumission ramène en ``RUNNING`` sans perdre le temps écoulé. Les calories
et conseils affichés à la fin viennent exclusivement du serveur.

Les rappels périodiques peuvent s'exécuter sur un autre thread que
``stop()`` : chaque chaîne de rappels porte un numéro, et tout rappel
d'une chaîne annulée est ignoré.
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from typing import Any, Callable

from fitsync.errors import AuthExpiredError, ValidationError
from fitsync.models import WorkoutResult
from fitsync.services.fitness import FitnessService
from fitsync.sync.scheduler import Scheduler

logger = logging.getLogger(__name__)

TICK_MS = 1000


class WorkoutStatus(enum.Enum):
    """États possibles du chronomètre."""

    IDLE = "idle"
    RUNNING = "running"
    SUBMITTING = "submitting"


class WorkoutStateError(RuntimeError):
    """Transition impossible depuis l'état courant du chronomètre."""


class WorkoutSession:
    """Séance chronométrée, soumise au serveur à l'arrêt."""

    def __init__(
        self,
        service: FitnessService,
        scheduler: Scheduler,
        *,
        clock: Callable[[], float] = time.monotonic,
        on_tick: Callable[[int], None] | None = None,
        tick_ms: int = TICK_MS,
    ) -> None:
        self._service = service
        self._scheduler = scheduler
        self._clock = clock
        self._on_tick = on_tick
        self._tick_ms = tick_ms
        self._lock = threading.RLock()
        self._tick_handle: Any = None
        self._chain = 0
        self._started_at: float | None = None
        self.status = WorkoutStatus.IDLE
        self.name = ""
        self.elapsed_seconds = 0
        self.last_result: WorkoutResult | None = None

    @property
    def is_running(self) -> bool:
        return self.status is WorkoutStatus.RUNNING

    @property
    def minutes(self) -> int:
        """Durée soumise au serveur : minutes entières écoulées."""
        return self.elapsed_seconds // 60

    def start(self, name: str) -> None:
        name = (name or "").strip()
        with self._lock:
            if self.status is not WorkoutStatus.IDLE:
                raise WorkoutStateError("Une séance est déjà en cours.")
            if not name:
                raise ValidationError("Veuillez saisir un nom de séance.")

            self.name = name
            self.elapsed_seconds = 0
            self.last_result = None
            self._started_at = self._clock()
            self.status = WorkoutStatus.RUNNING
            self._schedule_tick()
        logger.debug("Séance %r démarrée.", name)

    def tick(self) -> None:
        """Recalcule le temps écoulé et prévient l'écouteur, en RUNNING uniquement."""
        with self._lock:
            if self.status is not WorkoutStatus.RUNNING:
                return
            self._refresh_elapsed()
            elapsed = self.elapsed_seconds
        if self._on_tick is not None:
            self._on_tick(elapsed)

    def stop(self) -> WorkoutResult:
        """Fige le temps écoulé et soumet la séance au serveur."""
        with self._lock:
            if self.status is not WorkoutStatus.RUNNING:
                raise WorkoutStateError("Aucune séance en cours.")
            self._cancel_tick()
            self._refresh_elapsed()
            self.status = WorkoutStatus.SUBMITTING
            name, minutes = self.name, self.minutes

        try:
            result = self._service.log_activity(name, minutes)
        except AuthExpiredError:
            with self._lock:
                self._reset()
            raise
        except Exception:
            logger.info("Échec de l'enregistrement de %r, reprise du chronomètre.", name)
            with self._lock:
                if self.status is WorkoutStatus.SUBMITTING:
                    self.status = WorkoutStatus.RUNNING
                    self._schedule_tick()
            raise

        with self._lock:
            self._reset()
            self.last_result = result
        return result

    def dispose(self) -> None:
        """Annule le rappel périodique (vue fermée, déconnexion)."""
        with self._lock:
            self._reset()

    def _on_timer(self, chain: int) -> None:
        with self._lock:
            if chain != self._chain or self.status is not WorkoutStatus.RUNNING:
                return
            self._tick_handle = None
            self._schedule_tick()
        self.tick()

    def _refresh_elapsed(self) -> None:
        if self._started_at is None:
            return
        elapsed = int(self._clock() - self._started_at)
        self.elapsed_seconds = max(self.elapsed_seconds, elapsed)

    def _schedule_tick(self) -> None:
        chain = self._chain
        self._tick_handle = self._scheduler.after(self._tick_ms, lambda: self._on_timer(chain))

    def _cancel_tick(self) -> None:
        self._chain += 1
        if self._tick_handle is not None:
            self._scheduler.after_cancel(self._tick_handle)
            self._tick_handle = None

    def _reset(self) -> None:
        self._cancel_tick()
        self._started_at = None
        self.status = WorkoutStatus.IDLE
        self.name = ""
        self.elapsed_seconds = 0
