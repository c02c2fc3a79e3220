"""
Events

Mutation and lifecycle notifications.

Modules:
    types: EventType, AkashaEvent
    emitter: EventEmitter (on / off / once / emit)
"""

from akasha.events.emitter import EventEmitter, EventHandler
from akasha.events.types import AkashaEvent, EventType

__all__ = ["EventEmitter", "EventHandler", "AkashaEvent", "EventType"]
