"""Conversation avec l'assistant nutrition et fitness."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping
from uuid import uuid4

from fitsync.errors import ApiRejectedError, AuthExpiredError, ConnectivityError, GatewayError
from fitsync.models import ChatMessage
from fitsync.services.fitness import FitnessService

logger = logging.getLogger(__name__)

GREETING = (
    "Hi! I'm your AI fitness and nutrition assistant. I can help you with workout "
    "plans, meal planning, nutrition questions, supplement advice, and healthy "
    "lifestyle tips. What would you like to know?"
)
FALLBACK_REPLY = "I'm sorry, I couldn't process your request right now. Please try again."
CONNECTION_REPLY = (
    "I'm sorry, I'm having trouble connecting right now. "
    "Please check your internet connection and try again."
)

QUICK_QUESTIONS = (
    "What should I eat for breakfast?",
    "How much protein do I need daily?",
    "Best foods for weight loss?",
    "Healthy snack ideas?",
    "Create a workout plan for me",
    "How to lose weight effectively?",
)


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


# Ordre de résolution de la réponse du bot.
REPLY_RESOLVERS: tuple[Callable[[Any], Any], ...] = (
    lambda payload: payload["data"]["response"],
    lambda payload: payload["response"],
    lambda payload: payload["message"],
    lambda payload: payload,
)


def resolve_reply(payload: Any) -> str:
    """Extrait le texte de la réponse : ``data.response``, ``response``,
    ``message``, chaîne brute, puis message générique."""
    for resolver in REPLY_RESOLVERS:
        try:
            text = _text(resolver(payload))
        except (KeyError, TypeError, IndexError):
            continue
        if text is not None:
            return text
    return FALLBACK_REPLY


class ChatConversation:
    """Historique local de la conversation, jamais persisté."""

    def __init__(self, service: FitnessService) -> None:
        self._service = service
        self._messages: list[ChatMessage] = [
            ChatMessage(id=uuid4().hex, text=GREETING, is_user=False)
        ]
        self.is_loading = False

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._messages)

    def send(self, text: str) -> ChatMessage | None:
        """Ajoute le message utilisateur puis la réponse de l'assistant.

        Retourne None pour un message vide. Une session expirée est propagée
        afin que l'appelant renvoie vers l'écran de connexion.
        """
        text = (text or "").strip()
        if not text:
            return None

        self._messages.append(ChatMessage(id=uuid4().hex, text=text, is_user=True))
        state = self._service.state
        generation = state.snapshot()
        self.is_loading = True
        try:
            reply = resolve_reply(self._service.chat(text))
        except AuthExpiredError:
            raise
        except ApiRejectedError as exc:
            reply = exc.message or FALLBACK_REPLY
        except ConnectivityError:
            reply = CONNECTION_REPLY
        except GatewayError as exc:
            logger.warning("Réponse du chat inexploitable : %s", exc)
            reply = FALLBACK_REPLY
        finally:
            self.is_loading = False

        if not state.is_current(generation):
            return None
        bot_message = ChatMessage(id=uuid4().hex, text=reply, is_user=False)
        self._messages.append(bot_message)
        return bot_message

    def ask_quick_question(self, index: int) -> ChatMessage | None:
        return self.send(QUICK_QUESTIONS[index])
