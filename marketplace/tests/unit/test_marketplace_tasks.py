from unittest.mock import patch

import pytest

from marketplace.tasks import expire_stale_orders
from utils.service_base import ErrorCodes, service_err, service_ok


@pytest.mark.unit
class TestExpireStaleOrdersTask:
    @patch("infrastructure.container.container.order_service")
    def test_reports_expired_orders(self, mock_order_service):
        mock_order_service.return_value.expire_stale_orders.return_value = service_ok(
            {"expired": 2, "order_ids": ["a", "b"]}
        )

        outcome = expire_stale_orders(older_than_hours=24)

        assert outcome == {"success": True, "expired": 2, "order_ids": ["a", "b"]}
        mock_order_service.return_value.expire_stale_orders.assert_called_once_with(older_than_hours=24)

    @patch("infrastructure.container.container.order_service")
    def test_failure_is_retried(self, mock_order_service):
        mock_order_service.return_value.expire_stale_orders.return_value = service_err(
            ErrorCodes.INTERNAL_ERROR, "database is locked"
        )

        with patch.object(expire_stale_orders, "retry", side_effect=RuntimeError("retry")) as mock_retry:
            with pytest.raises(RuntimeError):
                expire_stale_orders()

        mock_retry.assert_called_once()
