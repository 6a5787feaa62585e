"""Mise à jour optimiste : appliquer localement, confirmer, sinon annuler."""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

from fitsync.errors import ApiError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OptimisticUpdate(Generic[T]):
    """Applique ``apply`` immédiatement puis exécute ``remote``.

    Si ``remote`` lève une :class:`ApiError`, ``rollback`` restaure l'état
    local avant que l'erreur ne soit propagée à l'appelant, qui informe
    l'utilisateur.
    """

    def __init__(
        self,
        apply: Callable[[], None],
        rollback: Callable[[], None],
        remote: Callable[[], T],
    ) -> None:
        self._apply = apply
        self._rollback = rollback
        self._remote = remote

    def run(self) -> T:
        self._apply()
        try:
            return self._remote()
        except ApiError as exc:
            logger.info("Mise à jour optimiste annulée (%s).", exc.kind)
            self._rollback()
            raise
