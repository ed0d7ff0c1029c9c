import json

import httpx
import pytest

from solar_crm.services.sheets_gateway import (
    NETWORK_ERROR_MESSAGE,
    SheetsApiError,
    SheetsGateway,
    SheetsHTTPError,
    SheetsNetworkError,
)

from tests.conftest import BASE_URL


def gateway_with(handler) -> SheetsGateway:
    return SheetsGateway(base_url=BASE_URL, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_call_sends_get_with_action_and_json_datos():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True, "mensaje": "Cliente actualizado"})

    result = await gateway_with(handler).call("actualizar", {"fila": 5, "cambios": {"nombre": "Núñez"}})

    assert result.ok is True
    assert result.mensaje == "Cliente actualizado"
    request = seen[0]
    assert request.method == "GET"
    assert str(request.url).startswith(BASE_URL)
    assert request.url.params["action"] == "actualizar"
    assert json.loads(request.url.params["datos"]) == {"fila": 5, "cambios": {"nombre": "Núñez"}}


@pytest.mark.asyncio
async def test_call_without_payload_omits_datos():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    gateway = gateway_with(handler)
    await gateway.ping()
    await gateway.call("listarUsuarios", {})

    assert all("datos" not in request.url.params for request in seen)
    assert [request.url.params["action"] for request in seen] == ["ping", "listarUsuarios"]


@pytest.mark.asyncio
async def test_application_failure_is_returned_not_raised():
    def handler(request):
        return httpx.Response(200, json={"ok": False, "mensaje": "Fila no encontrada"})

    result = await gateway_with(handler).call("eliminar", {"fila": 99})

    assert result.ok is False
    assert result.mensaje == "Fila no encontrada"


@pytest.mark.asyncio
async def test_envelope_fields_are_decoded():
    def handler(request):
        return httpx.Response(200, json={"ok": True, "datos": {"fila": 7}, "fila": 7, "extra": "ignored"})

    result = await gateway_with(handler).call("crear", {"nombre": "X"})

    assert result.datos == {"fila": 7}
    assert result.fila == 7


@pytest.mark.asyncio
async def test_non_2xx_raises_http_error_with_status():
    def handler(request):
        return httpx.Response(500, text="Internal error")

    with pytest.raises(SheetsHTTPError) as exc_info:
        await gateway_with(handler).call("leerTodos")

    assert exc_info.value.status_code == 500
    assert "500" in exc_info.value.message
    assert not isinstance(exc_info.value, SheetsNetworkError)


@pytest.mark.asyncio
async def test_unreachable_endpoint_raises_network_error():
    def handler(request):
        raise httpx.ConnectError("Failed to fetch", request=request)

    with pytest.raises(SheetsNetworkError) as exc_info:
        await gateway_with(handler).call("leerTodos")

    assert exc_info.value.message == NETWORK_ERROR_MESSAGE
    assert not isinstance(exc_info.value, SheetsHTTPError)


@pytest.mark.asyncio
async def test_redirect_is_followed():
    def handler(request):
        if request.url.host == "script.google.com":
            return httpx.Response(302, headers={"Location": "https://script.googleusercontent.com/echo?x=1"})
        return httpx.Response(200, json={"ok": True, "mensaje": "pong"})

    result = await gateway_with(handler).ping()

    assert result.mensaje == "pong"


@pytest.mark.asyncio
async def test_non_json_body_raises_api_error():
    def handler(request):
        return httpx.Response(200, text="<html>Sign in</html>")

    with pytest.raises(SheetsApiError) as exc_info:
        await gateway_with(handler).call("leerTodos")

    assert not isinstance(exc_info.value, (SheetsHTTPError, SheetsNetworkError))


@pytest.mark.asyncio
async def test_json_that_is_not_an_object_raises_api_error():
    def handler(request):
        return httpx.Response(200, json=[1, 2, 3])

    with pytest.raises(SheetsApiError):
        await gateway_with(handler).call("leerTodos")
