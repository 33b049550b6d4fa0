import hashlib
from unittest import mock

import pytest
import requests

from apps.payments.gateway import MidtransClient
from shared.domain.exceptions import GatewayError

SERVER_KEY = "SB-Mid-server-abc"


def _response(status_code=200, json_data=None):
    response = mock.Mock(spec=requests.Response)
    response.status_code = status_code
    response.json.return_value = json_data or {}
    response.text = ""
    response.reason = "Error"
    return response


def _client(response=None, error=None):
    http = mock.Mock(spec=requests.Session)
    if error is not None:
        http.request.side_effect = error
    else:
        http.request.return_value = response
    return MidtransClient(server_key=SERVER_KEY, timeout=7, session=http), http


def test_create_session_posts_to_sandbox_snap():
    client, http = _client(_response(201, {"token": "t-1", "redirect_url": "https://snap/t-1"}))

    session = client.create_session(
        order_reference="bk-1",
        gross_amount=150000,
        customer={"first_name": "Budi"},
        enabled_payments=["qris"],
        callbacks={"finish": "http://f/payment/success"},
    )

    assert session.token == "t-1"
    assert session.redirect_url == "https://snap/t-1"
    method, url = http.request.call_args.args
    kwargs = http.request.call_args.kwargs
    assert method == "post"
    assert url == "https://app.sandbox.midtrans.com/snap/v1/transactions"
    assert kwargs["auth"] == (SERVER_KEY, "")
    assert kwargs["timeout"] == 7
    assert kwargs["json"]["transaction_details"] == {"order_id": "bk-1", "gross_amount": 150000}
    assert kwargs["json"]["enabled_payments"] == ["qris"]


def test_production_urls():
    client = MidtransClient(server_key=SERVER_KEY, is_production=True)
    assert client.snap_url == "https://app.midtrans.com/snap/v1/transactions"
    assert client.status_url("bk-1") == "https://api.midtrans.com/v2/bk-1/status"


def test_http_error_becomes_gateway_error():
    client, _ = _client(_response(401, {"error_messages": ["Access denied"]}))

    with pytest.raises(GatewayError) as excinfo:
        client.create_session("bk-1", 1000, {}, ["qris"])

    assert excinfo.value.http_status == 401
    assert excinfo.value.is_client_error


def test_missing_token_is_an_error():
    client, _ = _client(_response(201, {"redirect_url": "x"}))
    with pytest.raises(GatewayError):
        client.create_session("bk-1", 1000, {}, ["qris"])


def test_timeout_becomes_gateway_error():
    client, _ = _client(error=requests.Timeout())

    with pytest.raises(GatewayError) as excinfo:
        client.get_transaction_status("bk-1")

    assert excinfo.value.http_status is None


def test_status_error_reported_in_body():
    client, _ = _client(_response(200, {"status_code": "404", "status_message": "Transaction doesn't exist."}))

    with pytest.raises(GatewayError) as excinfo:
        client.get_transaction_status("bk-1")

    assert excinfo.value.http_status == 404


def test_expired_status_is_not_an_error():
    client, http = _client(_response(200, {"status_code": "407", "transaction_status": "expire"}))

    status = client.get_transaction_status("bk-1")

    assert status.transaction_status == "expire"
    assert status.status_code == "407"
    assert http.request.call_args.args == ("get", "https://api.sandbox.midtrans.com/v2/bk-1/status")


def test_verify_signature():
    client = MidtransClient(server_key=SERVER_KEY)
    signature = hashlib.sha512(f"bk-1200150000.00{SERVER_KEY}".encode()).hexdigest()
    payload = {"order_id": "bk-1", "status_code": "200", "gross_amount": "150000.00"}

    assert client.verify_signature({**payload, "signature_key": signature})
    assert not client.verify_signature({**payload, "signature_key": "forged"})
    assert not client.verify_signature(payload)


def test_emulation_mode_needs_no_network():
    http = mock.Mock(spec=requests.Session)
    client = MidtransClient(server_key="", session=http)

    session = client.create_session("bk-1", 1000, {}, ["qris"])
    status = client.get_transaction_status("bk-1")

    assert client.emulated
    assert session.token
    assert status.transaction_status == "pending"
    assert not client.verify_signature({"order_id": "bk-1", "signature_key": "x"})
    http.request.assert_not_called()
