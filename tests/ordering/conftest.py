import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    from ordering.publishing import reset_publisher

    with ordering_bed.domain_context():
        reset_publisher()
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()
        reset_publisher()


class RecordingListener:
    """Publisher listener that keeps every event it is handed."""

    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)


@pytest.fixture()
def recorder():
    """Install a publisher that also hands every event to a recorder."""
    from ordering.publishing import set_publisher
    from ordering.publishing.publisher import DomainEventPublisher

    recording = RecordingListener()
    set_publisher(DomainEventPublisher([recording]))
    return recording


@pytest.fixture()
def gateway():
    """Install a fresh FakeGateway and hand it to the test."""
    from payments.gateway import set_gateway
    from payments.gateway.fake_adapter import FakeGateway

    fake = FakeGateway()
    set_gateway(fake)
    return fake
