"""État local optimiste des vues, réconcilié avec le serveur."""

from fitsync.sync.chat import ChatConversation, resolve_reply
from fitsync.sync.events import EventBoard
from fitsync.sync.feed import TipFeed
from fitsync.sync.optimistic import OptimisticUpdate
from fitsync.sync.scheduler import Scheduler, ThreadScheduler
from fitsync.sync.workout import WorkoutSession, WorkoutStatus

__all__ = [
    "ChatConversation",
    "EventBoard",
    "OptimisticUpdate",
    "Scheduler",
    "ThreadScheduler",
    "TipFeed",
    "WorkoutSession",
    "WorkoutStatus",
    "resolve_reply",
]
