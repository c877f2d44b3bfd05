"""Operation handlers: input parsing, request building and result text."""

from __future__ import annotations

import time

import pytest

from shadowpay.errors import InputError
from shadowpay.ui import operations as ops
from shadowpay.ui.messages import Error, Success
from shadowpay.ui.model import Model
from shadowpay.ui.views import BACK, MENU_ITEMS, View

from conftest import TEST_BASE_URL


def run(model: Model, view: View, index: int, *values: str):
    operation = ops.lookup(view, index)
    assert operation is not None
    command = ops.invoke(operation, model, values)
    return command.run()


@pytest.mark.parametrize(
    "raw, lamports",
    [
        ("1", 1_000_000_000),
        ("1.5", 1_500_000_000),
        (" 0.000000001 ", 1),
        ("2.25", 2_250_000_000),
    ],
)
def test_parse_sol_converts_to_lamports(raw: str, lamports: int) -> None:
    assert ops.parse_sol(raw) == lamports


@pytest.mark.parametrize(
    "raw", ["", "abc", "0", "-1", "NaN", "inf", "sNaN", "0.0000000001", "1e999999", "1e30"]
)
def test_parse_sol_rejects_bad_amounts(raw: str) -> None:
    with pytest.raises(InputError) as excinfo:
        ops.parse_sol(raw, "amount")
    assert str(excinfo.value).startswith("invalid amount")


@pytest.mark.parametrize("raw, expected", [("true", True), ("YES", True), ("1", True), ("false", False), (" no ", False), ("0", False)])
def test_parse_bool_accepts_common_spellings(raw: str, expected: bool) -> None:
    assert ops.parse_bool(raw) is expected


def test_parse_bool_rejects_other_text() -> None:
    with pytest.raises(InputError):
        ops.parse_bool("maybe")


def test_small_parsers() -> None:
    assert ops.split_and_trim(" payment.success, ,payment.failed ") == [
        "payment.success",
        "payment.failed",
    ]
    assert ops.optional("   ") is None
    assert ops.optional(" x ") == "x"
    assert ops.parse_int(" 6 ", "decimals") == 6
    with pytest.raises(InputError):
        ops.parse_int("six", "decimals")


def test_abbreviate_and_sol_formatting() -> None:
    assert ops.abbreviate("short") == "short"
    assert ops.abbreviate("x" * 25) == "x" * 20 + "..."
    assert ops.sol(1_234_500_000) == "1.2345"


@pytest.mark.parametrize("view", [view for view in View if view is not View.MAIN_MENU])
def test_every_sub_view_item_has_an_operation(view: View) -> None:
    for index, label in enumerate(MENU_ITEMS[view]):
        operation = ops.lookup(view, index)
        if label == BACK:
            assert operation is None
        else:
            assert operation is not None
            assert operation.label == label
            assert not operation.has_form or operation.title


def test_remote_without_client_reports_not_connected(offline_model: Model) -> None:
    result = run(offline_model, View.POOL, 3)
    assert result == Error(ops.NOT_CONNECTED)


def test_required_field_missing_is_input_error(api, model: Model) -> None:
    result = run(model, View.POOL, 0, "   ")

    assert result == Error("Error: wallet address is required")
    assert api.requests == []


@pytest.mark.parametrize(
    "view, index, values, reason",
    [
        (View.PAYMENT, 0, ("  ", "1"), "wallet address is required"),
        (View.PAYMENT, 1, ("", "1"), "wallet address is required"),
        (View.PAYMENT, 2, (" ", "1"), "receiver commitment is required"),
        (View.PAYMENT, 3, ("c1", "  ", "1", "Merchant1"), "nullifier is required"),
        (View.POOL, 1, ("\t", "1"), "wallet address is required"),
        (View.AUTHORIZATION, 0, ("User1", "bot", "0.5", "2", "3", "  "), "user signature is required"),
        (View.AUTHORIZATION, 2, ("User1", " ", "sig"), "authorized service is required"),
    ],
)
def test_blank_identifiers_are_rejected_before_sending(
    api, model: Model, view: View, index: int, values: tuple, reason: str
) -> None:
    result = run(model, view, index, *values)

    assert result == Error(f"Error: {reason}")
    assert api.requests == []


def test_overflowing_amount_is_input_error(api, model: Model) -> None:
    result = run(model, View.PAYMENT, 0, "Wallet1", "1e999999")

    assert isinstance(result, Error)
    assert result.text.startswith("Error: invalid amount")
    assert api.requests == []


def test_pool_balance_reports_sol_and_lamports(api, model: Model) -> None:
    api.add(
        "GET",
        "/shadowpay/api/pool/balance/Wallet1",
        {"wallet_address": "Wallet1", "balance": 2_500_000_000, "min_deposit": 10_000_000},
    )

    result = run(model, View.POOL, 0, "Wallet1")

    assert result == Success(
        "Pool Balance: 2.5000 SOL (2500000000 lamports)\nMin Deposit: 0.0100 SOL"
    )


def test_token_update_omits_blank_fields(api, model: Model) -> None:
    api.add("PATCH", "/shadowpay/api/tokens/update/Mint1", {"success": True, "message": "ok"})

    result = run(model, View.TOKEN, 2, "Mint1", "", "false")

    assert result == Success("Update Token: Success ✓\nok")
    assert api.body() == {"enabled": False}


def test_token_list_formats_each_token(api, model: Model) -> None:
    api.add(
        "GET",
        "/shadowpay/api/tokens/supported",
        {"tokens": [{"mint": "So111", "symbol": "SOL", "decimals": 9, "enabled": True}]},
    )

    result = run(model, View.TOKEN, 0)

    assert isinstance(result, Success)
    assert result.text.splitlines() == [
        "Supported Tokens:",
        "• SOL (✓ Enabled)",
        "  Mint: So111",
        "  Decimals: 9",
    ]


def test_authorize_spending_sends_sol_strings_and_expiry(api, model: Model) -> None:
    api.add(
        "POST",
        "/shadowpay/api/authorize-spending",
        {"success": True, "authorization_id": 7},
    )
    before = int(time.time())

    result = run(model, View.AUTHORIZATION, 0, "User1", "bot.example", "0.5", "2", "3", "sig")

    assert isinstance(result, Success)
    assert "Authorization ID: 7" in result.text
    body = api.body()
    assert body["max_amount_per_tx"] == "0.5"
    assert body["max_daily_spend"] == "2"
    assert before + 3 * ops.SECONDS_PER_DAY <= body["valid_until"] <= int(time.time()) + 3 * ops.SECONDS_PER_DAY


def test_authorize_spending_rejects_non_positive_days(api, model: Model) -> None:
    result = run(model, View.AUTHORIZATION, 0, "User1", "bot", "0.5", "2", "0", "sig")

    assert isinstance(result, Error)
    assert "valid days" in result.text
    assert api.requests == []


def test_webhook_logs_default_limit(api, model: Model) -> None:
    api.add("GET", "/shadowpay/api/webhooks/logs", {"logs": [], "total_count": 0})

    result = run(model, View.WEBHOOK, 3, "", "")

    assert result == Success("Webhook Logs (Total: 0): No logs found")
    assert api.body() == {"limit": ops.DEFAULT_LOG_LIMIT}


def test_webhook_logs_truncates_long_listings(api, model: Model) -> None:
    entries = [
        {"id": f"log_{idx}", "event": "payment.success", "status_code": 200, "success": True}
        for idx in range(13)
    ]
    api.add("GET", "/shadowpay/api/webhooks/logs", {"logs": entries, "total_count": 13})

    result = run(model, View.WEBHOOK, 3, "wh_1", "20")

    assert isinstance(result, Success)
    assert result.text.endswith("... and 3 more")
    assert api.body() == {"webhook_id": "wh_1", "limit": 20}


def test_webhook_register_splits_events(api, model: Model) -> None:
    api.add(
        "POST",
        "/shadowpay/api/webhooks/register",
        {"success": True, "webhook_id": "wh_9", "url": "https://hook", "events": ["a", "b"]},
    )

    result = run(model, View.WEBHOOK, 0, "https://hook", "a, b", "")

    assert isinstance(result, Success)
    assert "Events: a, b" in result.text
    assert api.body() == {"url": "https://hook", "events": ["a", "b"]}


def test_identity_proof_lists_first_hashes(api, model: Model) -> None:
    api.add(
        "POST",
        "/shadowpay/api/shadowid/proof",
        {"commitment": "c1", "leaf_index": 4, "root": "r", "proof": ["h0", "h1", "h2", "h3", "h4"]},
    )

    result = run(model, View.IDENTITY, 2, "c1")

    assert isinstance(result, Success)
    lines = result.text.splitlines()
    assert "Proof (5 hashes):" in lines
    assert "  [2] h2" in lines
    assert "  [3] h3" not in lines
    assert lines[-1] == "  ... and 2 more hashes"


def test_settle_builds_payment_requirements(api, model: Model) -> None:
    api.add("POST", "/shadowpay/v1/payment/settle", {"success": True, "tx_sig": "5ig"})

    result = run(model, View.PAYMENT, 5, "aGVhZGVy", "/premium", "Merchant1", "0.001")

    assert result == Success("Settle Payment: Success ✓\nTx Signature: 5ig")
    requirements = api.body()["paymentRequirements"]
    assert requirements["scheme"] == ops.SETTLE_SCHEME
    assert requirements["network"] == ops.SETTLE_NETWORK
    assert requirements["maxAmountRequired"] == "1000000"


def test_api_failure_becomes_error(api, model: Model) -> None:
    api.add("GET", "/shadowpay/api/merchant/earnings", {"message": "forbidden"}, status=403)

    result = run(model, View.MERCHANT, 0)

    assert result == Error("Error: shadowpay: forbidden (status 403)")


def test_set_endpoint_applies_and_persists(model: Model) -> None:
    result = run(model, View.SETTINGS, 1, "https://other.example/")

    assert model.settings.base_url == "https://other.example"
    assert model.client is not None
    assert model.client.base_url == "https://other.example"
    assert isinstance(result, Success)
    env_text = model.settings.env_file.read_text(encoding="utf-8")
    assert "SHADOWPAY_BASE_URL=https://other.example" in env_text


def test_set_endpoint_rejects_bad_url(model: Model) -> None:
    result = run(model, View.SETTINGS, 1, "not-a-url")

    assert isinstance(result, Error)
    assert model.settings.base_url == TEST_BASE_URL


def test_test_connection_reports_schemes(api, offline_model: Model) -> None:
    api.add(
        "GET",
        "/shadowpay/supported",
        {"x402Version": 1, "schemes": [{"scheme": "zkproof", "network": "solana-mainnet"}]},
    )

    result = run(offline_model, View.SETTINGS, 2)

    assert result == Success(
        f"Connection OK: {TEST_BASE_URL}\n"
        "x402 version: 1\n"
        "Schemes: zkproof (solana-mainnet)\n"
        "API key not set"
    )
