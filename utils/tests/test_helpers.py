import pytest
from rest_framework.request import Request
from rest_framework.test import APIRequestFactory

from utils.api import error_response, query_int
from utils.logging_utils import mask_value, sanitize_payload
from utils.service_base import ErrorCodes, http_status_for, service_err, service_ok


@pytest.mark.unit
class TestServiceResult:
    def test_ok_and_err(self):
        ok = service_ok({"id": 1})
        err = service_err(ErrorCodes.PRODUCT_NOT_FOUND, "Product x not found")

        assert ok.ok and ok.value == {"id": 1}
        assert not err.ok
        assert err.error == "product_not_found"
        assert err.error_detail == "Product x not found"

    @pytest.mark.parametrize(
        "code, status",
        [
            (ErrorCodes.ORDER_NOT_FOUND, 404),
            (ErrorCodes.NOT_STORE_OWNER, 403),
            (ErrorCodes.ORDER_ALREADY_EXISTS, 409),
            (ErrorCodes.INSUFFICIENT_STOCK, 400),
            (ErrorCodes.INTERNAL_ERROR, 500),
        ],
    )
    def test_http_status_for(self, code, status):
        assert http_status_for(code) == status

    def test_error_response(self):
        response = error_response(service_err(ErrorCodes.APPLICATION_EXISTS, "Already applied"))

        assert response.status_code == 409
        assert response.data == {"detail": "Already applied", "code": "application_exists"}


@pytest.mark.unit
class TestQueryInt:
    def request(self, **params):
        return Request(APIRequestFactory().get("/", params))

    def test_parsing(self):
        assert query_int(self.request(page="3"), "page", 1) == 3
        assert query_int(self.request(page="x"), "page", 1) == 1
        assert query_int(self.request(page="0"), "page", 1) == 1
        assert query_int(self.request(), "page", 1) == 1
        assert query_int(self.request(page_size="500"), "page_size", 20, maximum=100) == 100


@pytest.mark.unit
class TestMasking:
    def test_mask_email(self):
        assert mask_value("ayse@example.com") == "ay***@example.com"

    def test_mask_phone(self):
        assert mask_value("+90 555 123 4567") == "***67"

    def test_short_values_untouched(self):
        assert mask_value("pending") == "pending"
        assert mask_value(42) == 42

    def test_sanitize_payload(self):
        payload = {"email": "ayse@example.com", "password": "secret", "status": "ok"}

        assert sanitize_payload(payload, ["email", "status"]) == {"email": "ay***@example.com", "status": "ok"}
