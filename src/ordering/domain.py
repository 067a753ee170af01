"""Ordering bounded context — orders, line items and payment.

Owns the Order aggregate, the domain events it raises, the synchronous
publication of those events to in-process subscribers, and the payment
use case that drives an order through the external payment gateway.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
