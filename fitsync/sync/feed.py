"""Fil de conseils santé : j'aime, favoris et commentaires locaux."""

from __future__ import annotations

from typing import Iterable
from uuid import uuid4

from fitsync.models import Comment, HealthTip

CATEGORIES = ("nutrition", "workout", "sleep", "wellness")
ALL_CATEGORIES = "all"


class TipFeed:
    """Collection de conseils dont l'état n'existe que côté client.

    Aucun backend ne synchronise ces interactions : elles ne sont jamais
    persistées et disparaissent à la fermeture de la vue.
    """

    def __init__(self, tips: Iterable[HealthTip] = ()) -> None:
        self._tips: dict[str, HealthTip] = {tip.id: tip for tip in tips}

    def __len__(self) -> int:
        return len(self._tips)

    def get(self, tip_id: str) -> HealthTip:
        try:
            return self._tips[tip_id]
        except KeyError as exc:
            raise KeyError(f"Conseil inconnu : {tip_id}") from exc

    def toggle_like(self, tip_id: str) -> HealthTip:
        """Inverse le « j'aime » et ajuste le compteur d'une unité."""
        tip = self.get(tip_id)
        tip.likes += -1 if tip.is_liked else 1
        tip.is_liked = not tip.is_liked
        return tip

    def toggle_bookmark(self, tip_id: str) -> HealthTip:
        tip = self.get(tip_id)
        tip.is_bookmarked = not tip.is_bookmarked
        return tip

    def add_comment(self, tip_id: str, text: str, *, user: str = "You") -> Comment | None:
        """Ajoute un commentaire local ; un texte vide est ignoré."""
        tip = self.get(tip_id)
        text = (text or "").strip()
        if not text:
            return None
        comment = Comment(
            id=uuid4().hex,
            user=user,
            text=text,
        )
        tip.comments.append(comment)
        return comment

    def filter(self, category: str = ALL_CATEGORIES) -> list[HealthTip]:
        if category == ALL_CATEGORIES:
            return list(self._tips.values())
        if category not in CATEGORIES:
            raise ValueError(f"Catégorie inconnue : {category}")
        return [tip for tip in self._tips.values() if tip.category == category]

    def bookmarked(self) -> list[HealthTip]:
        return [tip for tip in self._tips.values() if tip.is_bookmarked]
