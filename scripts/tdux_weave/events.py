#!/usr/bin/env python3
"""
Event model for the headless page chrome.
Listeners are registered per (target, event type) and dispatched synchronously.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple


@dataclass
class MouseEvent:
    client_x: float = 0
    client_y: float = 0
    target: Any = None


@dataclass
class TouchEvent:
    touches: List[Tuple[float, float]] = field(default_factory=list)  # (clientX, clientY)
    timestamp: float = 0  # ms
    target: Any = None

    @property
    def client_x(self) -> float:
        return self.touches[0][0]


@dataclass
class KeyEvent:
    key: str = ""
    target: Any = None


@dataclass
class Window:
    """Viewport measurements the controllers read."""
    inner_width: int = 1280
    body_client_width: Optional[int] = None

    @property
    def body_width(self) -> int:
        if self.body_client_width is None:
            return self.inner_width
        return self.body_client_width


Handler = Callable[[Any], Any]


class EventHub:
    """Stands in for addEventListener/removeEventListener/dispatchEvent."""

    def __init__(self):
        self._listeners: Dict[Tuple[int, str], List[Handler]] = defaultdict(list)
        self._targets: Dict[int, Any] = {}

    def add_listener(self, target: Any, event_type: str, handler: Handler) -> None:
        key = (id(target), event_type)
        if handler not in self._listeners[key]:
            self._listeners[key].append(handler)
        self._targets[id(target)] = target

    def remove_listener(self, target: Any, event_type: str, handler: Handler) -> None:
        listeners = self._listeners.get((id(target), event_type))
        if listeners and handler in listeners:
            listeners.remove(handler)

    def listeners(self, target: Any, event_type: str) -> List[Handler]:
        return list(self._listeners.get((id(target), event_type), ()))

    def dispatch(self, target: Any, event_type: str, event: Any = None) -> int:
        """Run listeners in registration order. Returns how many ran."""
        handlers = self.listeners(target, event_type)
        for handler in handlers:
            handler(event)
        return len(handlers)
