"""Event publisher factory.

Provides get_publisher() / set_publisher() so use cases share one publisher
and tests can swap in their own listeners. The order subscribers are Protean
event handlers and are found through the domain, not registered here.
"""

from ordering.publishing.publisher import DomainEventPublisher

_current_publisher: DomainEventPublisher | None = None


def get_publisher() -> DomainEventPublisher:
    """Return the current publisher."""
    global _current_publisher
    if _current_publisher is None:
        _current_publisher = DomainEventPublisher()
    return _current_publisher


def set_publisher(publisher: DomainEventPublisher) -> None:
    """Override the active publisher (useful for tests)."""
    global _current_publisher
    _current_publisher = publisher


def reset_publisher() -> None:
    """Reset to the default publisher."""
    global _current_publisher
    _current_publisher = None
