"""
Trouble Game Session.

Turn state machine, scheduled callbacks and session events.
"""

from trouble.session.events import EventPayload, GameEvent
from trouble.session.game import GameSession
from trouble.session.scheduler import ManualScheduler, Scheduler, ThreadingScheduler

__all__ = [
    "EventPayload",
    "GameEvent",
    "GameSession",
    "ManualScheduler",
    "Scheduler",
    "ThreadingScheduler",
]
