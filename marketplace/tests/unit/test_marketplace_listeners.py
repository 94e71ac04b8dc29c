import logging
from unittest.mock import patch

import pytest

from infrastructure.events.in_memory_event_bus import InMemoryEventBus
from marketplace.infra.events.listeners import (
    log_order_status_changed,
    log_product_moderated,
    register_marketplace_listeners,
)


@pytest.mark.unit
class TestMarketplaceListeners:
    def test_register_subscribes_moderation_and_order_events(self):
        bus = InMemoryEventBus()

        with patch("marketplace.infra.events.listeners.get_event_bus", return_value=bus):
            register_marketplace_listeners()

        for event_type in ("product.submitted", "product.approved", "product.rejected", "order.status_changed"):
            assert bus._subscribers.get(event_type), event_type

    def test_moderation_decision_is_logged(self, caplog):
        event = {"event_type": "product.rejected", "payload": {"product_id": "p-1", "admin_id": "a-1"}}

        with caplog.at_level(logging.INFO, logger="marketplace.infra.events.listeners"):
            log_product_moderated(event)

        assert "Product p-1 rejected by admin a-1" in caplog.text

    def test_status_change_is_logged(self, caplog):
        event = {"payload": {"order_id": "o-1", "old_status": "pending", "new_status": "shipped"}}

        with caplog.at_level(logging.INFO, logger="marketplace.infra.events.listeners"):
            log_order_status_changed(event)

        assert "Order o-1: pending -> shipped" in caplog.text
