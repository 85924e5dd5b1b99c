import json

import httpx
import pytest

from pizza_service.services.factory import (
    HttpOrderFactoryService,
    MockOrderFactoryService,
    get_order_factory_service,
    reset_order_factory_service,
)

DINER = {"id": 1, "name": "pizza diner", "email": "d@jwt.com"}
ORDER = {"id": 7, "franchiseId": 1, "storeId": 1, "items": [{"menuId": 1, "description": "Veggie", "price": 0.05}]}


def http_service(handler) -> HttpOrderFactoryService:
    return HttpOrderFactoryService(
        base_url="http://factory.test",
        api_key="factory-key",
        transport=httpx.MockTransport(handler),
    )


async def test_http_submit_success():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"jwt": "signed.order.jwt", "reportUrl": "http://factory.test/report/1"})

    result = await http_service(handler).submit_order(DINER, ORDER)

    assert result.success
    assert result.jwt == "signed.order.jwt"
    assert result.report_url == "http://factory.test/report/1"
    assert seen == {
        "path": "/api/order",
        "auth": "Bearer factory-key",
        "body": {"diner": DINER, "order": ORDER},
    }


async def test_http_submit_error_status():
    def handler(request):
        return httpx.Response(500, json={"message": "oven on fire", "reportUrl": "http://factory.test/report/2"})

    result = await http_service(handler).submit_order(DINER, ORDER)

    assert not result.success
    assert result.status_code == 500
    assert result.error_message == "oven on fire"
    assert result.report_url == "http://factory.test/report/2"


async def test_http_submit_error_without_body():
    def handler(request):
        return httpx.Response(503, text="unavailable")

    result = await http_service(handler).submit_order(DINER, ORDER)

    assert not result.success
    assert result.report_url is None
    assert result.error_message == "Order factory responded 503"


async def test_http_submit_missing_jwt():
    def handler(request):
        return httpx.Response(200, json={"reportUrl": "http://factory.test/report/3"})

    result = await http_service(handler).submit_order(DINER, ORDER)

    assert not result.success
    assert result.report_url == "http://factory.test/report/3"


async def test_http_submit_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    result = await http_service(handler).submit_order(DINER, ORDER)

    assert not result.success
    assert result.error_message == "Order factory unreachable: ConnectError"
    assert result.status_code is None


async def test_http_health_check():
    assert await http_service(lambda request: httpx.Response(404)).health_check()
    assert not await http_service(lambda request: httpx.Response(502)).health_check()


def test_http_requires_api_key(monkeypatch):
    from pizza_service.core.config import get_settings

    monkeypatch.setattr(get_settings(), "factory_api_key", None)
    with pytest.raises(ValueError):
        HttpOrderFactoryService(base_url="http://factory.test")


async def test_mock_success_issues_jwt_and_report_url():
    service = MockOrderFactoryService()
    result = await service.submit_order(DINER, ORDER)

    assert result.success
    assert result.jwt.count(".") == 2
    assert result.report_url.startswith(MockOrderFactoryService.REPORT_BASE_URL)
    assert list(service.submitted) == [{"diner": DINER, "order": ORDER}]


async def test_mock_failure_rate():
    result = await MockOrderFactoryService(failure_rate=1.0).submit_order(DINER, ORDER)

    assert not result.success
    assert result.jwt is None
    assert result.report_url
    assert result.to_dict()["success"] is False


def test_development_mode_uses_mock():
    reset_order_factory_service()
    try:
        service = get_order_factory_service()
        assert service.provider_name == "mock"
        assert get_order_factory_service() is service
    finally:
        reset_order_factory_service()
