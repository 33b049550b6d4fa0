"""
Base Domain Classes

Building blocks shared by the booking and payment domains:
- ValueObject: Immutable objects compared by value
- DomainEvent: Something that happened, published after commit
- EventRecorder: Mixin letting ORM aggregates collect domain events
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import List
from uuid import UUID, uuid4


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


@dataclass
class DomainEvent:
    """
    Base class for domain events

    Domain events are collected by the unit of work and handed to the
    message bus once the surrounding transaction has committed.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=datetime.now)
    aggregate_id: UUID = None

    def to_dict(self) -> dict:
        """Convert event to dictionary for serialization"""
        return {
            'event_id': str(self.event_id),
            'event_type': self.__class__.__name__,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': str(self.aggregate_id) if self.aggregate_id else None,
        }


class EventRecorder:
    """
    Mixin for aggregate roots backed by Django models

    Django builds model instances without calling a dataclass __post_init__,
    so the event buffer is created lazily on first use.
    """

    def _event_buffer(self) -> List[DomainEvent]:
        buffer = self.__dict__.get('_domain_events')
        if buffer is None:
            buffer = []
            self.__dict__['_domain_events'] = buffer
        return buffer

    def add_event(self, event: DomainEvent):
        """Add a domain event to be published"""
        self._event_buffer().append(event)

    def clear_events(self):
        """Clear all collected events (called after publishing)"""
        self._event_buffer().clear()

    @property
    def events(self) -> List[DomainEvent]:
        """Get copy of collected events"""
        return list(self._event_buffer())
