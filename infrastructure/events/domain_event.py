from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class DomainEvent:
    """
    Base class for the domain events every app publishes.

    Only ``event_type`` and ``payload`` travel on the bus; the bus wraps them
    in the ``{"event_type", "occurred_at", "payload"}`` envelope on publish.
    """

    event_type: str
    payload: Dict[str, Any] = field(default_factory=dict)
