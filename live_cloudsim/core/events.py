"""Simulation events and event types."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List

from loguru import logger


class EventType(Enum):
    """Types of simulation events."""

    # Resource events
    VM_CREATED = "vm_created"
    VM_FAILED = "vm_failed"

    # Task lifecycle: SUBMITTED -> QUEUED -> EXECUTING -> FINISHED
    TASK_SUBMITTED = "task_submitted"
    TASK_QUEUED = "task_queued"
    TASK_STARTED = "task_started"
    TASK_PROGRESS = "task_progress"
    TASK_FINISHED = "task_finished"


@dataclass
class SimulationEvent:
    """A simulation event with timestamp and associated data."""

    timestamp: float
    event_type: EventType
    resource_id: str
    data: Dict[str, Any] = field(default_factory=dict)
    priority: int = 0

    def __lt__(self, other: "SimulationEvent") -> bool:
        """Compare events for ordering."""
        if self.timestamp != other.timestamp:
            return self.timestamp < other.timestamp
        return self.priority < other.priority


EventHandler = Callable[[SimulationEvent], None]


class EventBus:
    """Dispatches simulation events to subscribers and keeps the event log."""

    def __init__(self) -> None:
        self.history: List[SimulationEvent] = []
        self.event_handlers: Dict[EventType, List[EventHandler]] = {}

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Subscribe a handler to an event type."""
        self.event_handlers.setdefault(event_type, []).append(handler)
        logger.debug(f"Handler subscribed to {event_type.value}")

    def publish(self, event: SimulationEvent) -> None:
        """Record an event and hand it to all subscribers."""
        self.history.append(event)
        logger.debug(f"{event.event_type.value} at {event.timestamp:.2f}s "
                     f"for {event.resource_id}")

        for handler in self.event_handlers.get(event.event_type, []):
            handler(event)

    def events_of(self, event_type: EventType) -> List[SimulationEvent]:
        return [e for e in self.history if e.event_type == event_type]

    def clear(self) -> None:
        """Clear the event log."""
        self.history.clear()
