"""Synchronous, in-process publication of Order domain events.

Each event is delivered, one target after the other, to:

1. the Protean event handlers registered for it on the domain
   (``current_domain.handlers_for``), in domain registration order, then
2. any extra listeners registered on the publisher, in registration order.

A failing target is logged and recorded in the returned ``PublishReport``;
it never stops delivery to the targets after it, and it never reaches the
caller as an exception.

Use cases that persist an aggregate go through ``publish_after_commit`` so
that nothing is delivered until the storage write has committed.
"""

from dataclasses import dataclass, field

import structlog
from protean import UnitOfWork, current_domain, current_uow
from protean.exceptions import IncorrectUsageError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SubscriberFailure:
    """A subscriber raised while handling an event."""

    subscriber: str
    event_type: str
    event_id: str | None
    error: str


@dataclass
class PublishReport:
    """Outcome of a publish cycle."""

    published: int = 0
    deliveries: int = 0
    failures: list[SubscriberFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def merge(self, other: "PublishReport") -> "PublishReport":
        self.published += other.published
        self.deliveries += other.deliveries
        self.failures.extend(other.failures)
        return self


def _listener_name(listener) -> str:
    return getattr(listener, "__name__", None) or type(listener).__name__


class DomainEventPublisher:
    def __init__(self, listeners=None) -> None:
        self._listeners: list = list(listeners or [])

    @property
    def listeners(self) -> list:
        return list(self._listeners)

    def register(self, listener) -> None:
        """Add a callable that receives every published event."""
        self._listeners.append(listener)

    def handlers_for(self, event) -> list:
        """Event handler classes the domain routes this event to, in registration order."""
        resolved = current_domain.handlers_for(event)
        return [
            record.cls
            for record in current_domain.registry.event_handlers.values()
            if record.cls in resolved
        ]

    def _targets(self, event):
        for handler_cls in self.handlers_for(event):
            yield handler_cls.__name__, handler_cls._handle
        for listener in self._listeners:
            yield _listener_name(listener), listener

    def publish(self, event) -> PublishReport:
        """Deliver one event to its handlers and to every listener."""
        report = PublishReport(published=1)
        event_name = type(event).__name__
        event_id = getattr(event, "event_id", None)

        for name, deliver in self._targets(event):
            try:
                deliver(event)
                report.deliveries += 1
            except Exception as exc:
                logger.exception(
                    "Subscriber failed while handling event",
                    subscriber=name,
                    event_type=event_name,
                    event_id=event_id,
                )
                report.failures.append(
                    SubscriberFailure(
                        subscriber=name,
                        event_type=event_name,
                        event_id=event_id,
                        error=str(exc),
                    )
                )
        return report

    def publish_events(self, events, aggregate_id=None) -> PublishReport:
        report = PublishReport()
        if not events:
            logger.debug("No domain events to publish", aggregate_id=aggregate_id)
            return report

        logger.info("Publishing domain events", aggregate_id=aggregate_id, event_count=len(events))
        for event in events:
            report.merge(self.publish(event))

        if report.failures:
            logger.warning(
                "Domain events published with subscriber failures",
                aggregate_id=aggregate_id,
                failure_count=len(report.failures),
            )
        return report

    def publish_all(self, aggregate) -> PublishReport:
        """Publish the aggregate's pending events in order, then clear them.

        The pending list is cleared even if delivery blows up part way
        through, so a publish cycle never runs twice for the same events.
        """
        events = aggregate.pending_events
        try:
            return self.publish_events(events, aggregate_id=getattr(aggregate, "id", None))
        finally:
            aggregate.clear_events()

    def publish_after_commit(self, aggregate, persist) -> PublishReport:
        """Run ``persist(aggregate)`` in its own unit of work, then publish.

        The pending events are taken off the aggregate before the commit, so
        the unit of work neither stores nor dispatches them. They are
        delivered only after the commit succeeds. When the write fails they
        are put back on the aggregate, nothing is delivered, and the error
        propagates.
        """
        if current_uow and current_uow.in_progress:
            raise IncorrectUsageError(
                "Events cannot be published after commit from inside an active unit of work"
            )

        events = aggregate.pending_events
        aggregate.clear_events()
        try:
            with UnitOfWork():
                persist(aggregate)
        except Exception:
            aggregate._events.extend(events)
            raise

        return self.publish_events(events, aggregate_id=getattr(aggregate, "id", None))
