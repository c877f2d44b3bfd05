"""HTTP client behaviour against a mocked transport."""

from __future__ import annotations

import httpx
import pytest

from shadowpay import __version__
from shadowpay import schemas as s
from shadowpay.client import ShadowPay
from shadowpay.errors import APIError, DecodeError, TransportError

from conftest import TEST_API_KEY, TEST_BASE_URL


@pytest.fixture()
def client(api):
    with ShadowPay(TEST_API_KEY, base_url=TEST_BASE_URL, transport=api.transport) as client:
        yield client


def test_requests_carry_headers(api, client: ShadowPay) -> None:
    api.add("GET", "/shadowpay/api/pool/deposit-address", {"deposit_address": "Addr"})

    client.pool.deposit_address()

    request = api.requests[0]
    assert request.headers["X-API-Key"] == TEST_API_KEY
    assert request.headers["User-Agent"] == f"shadowpay-console/{__version__}"
    assert request.headers["Content-Type"] == "application/json"


def test_anonymous_client_omits_api_key(api) -> None:
    api.add("GET", "/shadowpay/supported", {"x402Version": 1, "schemes": []})
    with ShadowPay(base_url=TEST_BASE_URL, transport=api.transport) as client:
        client.verify.supported()

    assert "X-API-Key" not in api.requests[0].headers


def test_deposit_round_trip(api, client: ShadowPay) -> None:
    api.add(
        "POST",
        "/shadowpay/v1/payment/deposit",
        {
            "unsigned_tx_base64": "AQID",
            "recent_blockhash": "Blockhash1",
            "last_valid_block_height": 42,
            "unexpected": "ignored",
        },
    )

    resp = client.payment.deposit(s.DepositRequest(wallet_address="W1", amount=5))

    assert resp == s.DepositResponse(
        unsigned_tx_base64="AQID", recent_blockhash="Blockhash1", last_valid_block_height=42
    )
    assert api.body() == {"wallet_address": "W1", "amount": 5}


def test_path_segments_are_escaped(api, client: ShadowPay) -> None:
    api.add("GET", "/shadowpay/api/pool/balance/abc/def", {"wallet_address": "abc/def", "balance": 7})

    resp = client.pool.balance("abc/def")

    assert resp.balance == 7
    assert b"/shadowpay/api/pool/balance/abc%2Fdef" in api.requests[0].url.raw_path


def test_nested_records_are_decoded(api, client: ShadowPay) -> None:
    api.add(
        "GET",
        "/shadowpay/api/tokens/supported",
        {
            "tokens": [
                {"mint": "So111", "symbol": "SOL", "decimals": 9, "enabled": True},
                {"mint": "EPj", "symbol": "USDC", "decimals": 6, "enabled": False},
            ]
        },
    )

    resp = client.token.list_supported()

    assert [token.symbol for token in resp.tokens] == ["SOL", "USDC"]
    assert isinstance(resp.tokens[0], s.Token)
    assert resp.tokens[1].enabled is False


def test_token_update_sends_only_set_fields(api, client: ShadowPay) -> None:
    api.add("PATCH", "/shadowpay/api/tokens/update/EPj", {"success": True})

    resp = client.token.update("EPj", s.UpdateTokenRequest(enabled=False))

    assert resp.success
    assert api.requests[0].method == "PATCH"
    assert api.body() == {"enabled": False}


def test_token_remove_uses_delete(api, client: ShadowPay) -> None:
    api.add("DELETE", "/shadowpay/api/tokens/remove/EPj", {"success": True, "message": "gone"})

    resp = client.token.remove("EPj")

    assert resp.message == "gone"
    assert api.body() is None


def test_settle_uses_x402_wire_names(api, client: ShadowPay) -> None:
    api.add("POST", "/shadowpay/v1/payment/settle", {"success": True, "tx_sig": "sig"})
    requirements = s.PaymentRequirements(
        scheme="zkproof",
        network="solana-mainnet",
        max_amount_required="1000",
        resource="/premium",
        pay_to="Merchant1",
    )

    client.payment.settle(
        s.SettleRequest(payment_header="aGVhZGVy", resource="/premium", payment_requirements=requirements)
    )

    body = api.body()
    assert body["x402Version"] == 1
    assert body["paymentHeader"] == "aGVhZGVy"
    assert body["paymentRequirements"]["payTo"] == "Merchant1"
    assert body["paymentRequirements"]["maxAmountRequired"] == "1000"
    assert body["paymentRequirements"]["maxTimeoutSeconds"] == 60


def test_supported_schemes_use_camel_case_version(api, client: ShadowPay) -> None:
    api.add(
        "GET",
        "/shadowpay/supported",
        {"x402Version": 1, "schemes": [{"scheme": "zkproof", "network": "solana-mainnet"}]},
    )

    resp = client.verify.supported()

    assert resp.x402_version == 1
    assert resp.schemes == [s.Scheme(scheme="zkproof", network="solana-mainnet")]


def test_api_error_carries_message_and_detail(api, client: ShadowPay) -> None:
    api.add(
        "POST",
        "/shadowpay/api/pool/withdraw",
        {"message": "insufficient balance", "error": "need 2 SOL"},
        status=400,
    )

    with pytest.raises(APIError) as excinfo:
        client.pool.withdraw(s.PoolWithdrawRequest(wallet_address="W", amount=1))

    error = excinfo.value
    assert error.status_code == 400
    assert error.message == "insufficient balance"
    assert error.detail == "need 2 SOL"
    assert str(error) == "shadowpay: insufficient balance (status 400) - need 2 SOL"


def test_api_error_without_json_body(api, client: ShadowPay) -> None:
    api.add("GET", "/shadowpay/api/merchant/earnings", "upstream exploded", status=502)

    with pytest.raises(APIError) as excinfo:
        client.merchant.earnings()

    assert excinfo.value.status_code == 502
    assert "Bad Gateway" in str(excinfo.value)


def test_undecodable_body_raises_decode_error(api, client: ShadowPay) -> None:
    api.add("GET", "/shadowpay/api/shadowid/root", "<html>")

    with pytest.raises(DecodeError):
        client.shadowid.root()


def test_non_object_body_raises_decode_error(api, client: ShadowPay) -> None:
    api.add("GET", "/shadowpay/api/webhooks/stats", [1, 2, 3])

    with pytest.raises(DecodeError):
        client.webhook.stats()


def test_empty_body_decodes_to_defaults(api, client: ShadowPay) -> None:
    api.add("POST", "/shadowpay/api/webhooks/deactivate", None, status=204)

    resp = client.webhook.deactivate(s.DeactivateWebhookRequest(webhook_id="wh_1"))

    assert resp == s.DeactivateWebhookResponse()


def test_transport_failure_raises_transport_error() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with ShadowPay(TEST_API_KEY, base_url=TEST_BASE_URL, transport=httpx.MockTransport(refuse)) as client:
        with pytest.raises(TransportError) as excinfo:
            client.shadowid.status("c1")

    assert "connection refused" in str(excinfo.value)


def test_verify_access_sends_token_body(api, client: ShadowPay) -> None:
    api.add("GET", "/shadowpay/v1/payment/verify-access", {"valid": True, "merchant": "M"})

    resp = client.payment.verify_access("tok_123")

    assert resp.valid
    assert api.body() == {"token": "tok_123"}
