"""EventBus for decoupled publish/subscribe communication."""

from enum import Enum, auto
from typing import Any, Callable
from collections import defaultdict


class EventType(Enum):
    # Configuration edits
    MESH_CONFIG_CHANGED = auto()     # data: keys (tuple[str, ...])
    WATER_CONFIG_CHANGED = auto()    # data: keys (tuple[str, ...])

    # Scene
    MESH_REPLACED = auto()           # data: mesh (MeshInstance), previous (MeshInstance | None)

    # Frame events
    FRAME_UPDATE = auto()            # data: elapsed (float)


class EventBus:
    """Simple publish/subscribe event system."""

    def __init__(self):
        self._handlers: dict[EventType, list[Callable]] = defaultdict(list)

    def subscribe(self, event_type: EventType, handler: Callable) -> None:
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: EventType, handler: Callable) -> None:
        handlers = self._handlers[event_type]
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event_type: EventType, **data: Any) -> None:
        # Copy so handlers may unsubscribe while being dispatched
        for handler in list(self._handlers[event_type]):
            handler(**data)

    def clear(self) -> None:
        self._handlers.clear()
