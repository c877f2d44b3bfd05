"""Operation table mapping ``(view, menu index)`` to forms and commands.

Handlers run inside :meth:`Model.update`, so they may read and replace the
model's settings and client. Anything that touches the network or the keyring
is deferred into the returned :class:`~shadowpay.ui.commands.Command`.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, DecimalException
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Sequence, Tuple

from .. import config
from .. import schemas as s
from ..client import ShadowPay
from ..errors import ConfigError, InputError, ShadowPayError
from ..utils import mask_secret
from .commands import Command
from .messages import Error, Message, Success, error_from
from .views import View

if TYPE_CHECKING:  # pragma: no cover - imported only for type checking
    from .model import Model

NOT_CONNECTED = "Please set API key in Settings first"
SECONDS_PER_DAY = 24 * 60 * 60
MAX_LAMPORTS = 2**64 - 1
DEFAULT_LOG_LIMIT = 50
MAX_LOG_LINES = 10
MAX_PROOF_HASHES = 3
MAX_TOP_RESOURCES = 5
SETTLE_SCHEME = "zkproof"
SETTLE_NETWORK = "solana-mainnet"

Handler = Callable[["Model", Sequence[str]], Command]
RemoteCall = Callable[[ShadowPay], str]


@dataclass(frozen=True)
class Operation:
    """A sub-view menu entry: an optional form plus the handler it feeds."""

    label: str
    handler: Handler
    title: str = ""
    fields: Tuple[str, ...] = ()

    @property
    def has_form(self) -> bool:
        return bool(self.fields)


# --- input parsing ------------------------------------------------------------


def parse_sol(raw: str, name: str = "amount") -> int:
    """Convert a decimal SOL amount into a positive number of lamports."""

    text = raw.strip()
    try:
        value = Decimal(text)
        if not value.is_finite() or value <= 0:
            raise InputError(f"invalid {name}: {text!r} must be a positive number")
        lamports = int(value * s.LAMPORTS_PER_SOL)
    except DecimalException as exc:
        raise InputError(f"invalid {name}: {text!r}") from exc
    if lamports > MAX_LAMPORTS:
        raise InputError(f"invalid {name}: {text!r} exceeds the maximum amount")
    if lamports <= 0:
        raise InputError(f"invalid {name}: {text!r} is below one lamport")
    return lamports


def parse_int(raw: str, name: str) -> int:
    text = raw.strip()
    try:
        return int(text)
    except ValueError as exc:
        raise InputError(f"invalid {name}: {text!r}") from exc


def parse_bool(raw: str, name: str = "enabled") -> bool:
    text = raw.strip().lower()
    if text in {"true", "yes", "1"}:
        return True
    if text in {"false", "no", "0"}:
        return False
    raise InputError(f"invalid {name}: {raw.strip()!r} (expected true/false)")


def optional(raw: str) -> Optional[str]:
    text = raw.strip()
    return text or None


def required(raw: str, name: str) -> str:
    text = raw.strip()
    if not text:
        raise InputError(f"{name} is required")
    return text


def split_and_trim(raw: str, sep: str = ",") -> List[str]:
    return [part.strip() for part in raw.split(sep) if part.strip()]


# --- result formatting --------------------------------------------------------


def sol(lamports: int) -> str:
    return f"{s.lamports_to_sol(lamports):.4f}"


def abbreviate(value: str, width: int = 20) -> str:
    if len(value) <= width:
        return value
    return value[:width] + "..."


def outcome(flag: bool, ok: str = "Success ✓", failed: str = "Failed") -> str:
    return ok if flag else failed


def _join(*lines: str) -> str:
    return "\n".join(line for line in lines if line)


def _timestamp(epoch: int) -> str:
    return datetime.fromtimestamp(epoch).strftime("%Y-%m-%d %H:%M:%S")


# --- command builders ---------------------------------------------------------


def remote(model: "Model", label: str, call: RemoteCall) -> Command:
    """Defer ``call`` against the model's current client."""

    client = model.client
    if client is None:
        return Command.resolved(Error(NOT_CONNECTED))

    def body() -> Message:
        try:
            return Success(call(client))
        except ShadowPayError as exc:
            return error_from(exc)

    return Command(body=body, label=label)


def invoke(operation: Operation, model: "Model", values: Sequence[str]) -> Command:
    """Run ``operation``'s handler, turning input problems into an Error."""

    try:
        return operation.handler(model, values)
    except (InputError, ConfigError) as exc:
        return Command.resolved(error_from(exc))


# --- ZK payments ----------------------------------------------------------------


def _payment_deposit(model: "Model", values: Sequence[str]) -> Command:
    req = s.DepositRequest(
        wallet_address=required(values[0], "wallet address"),
        amount=parse_sol(values[1]),
    )

    def call(client: ShadowPay) -> str:
        resp = client.payment.deposit(req)
        return _join(
            "Deposit transaction created!",
            f"Blockhash: {resp.recent_blockhash}",
            "Sign and send the transaction to complete.",
        )

    return remote(model, "Creating deposit transaction...", call)


def _payment_withdraw(model: "Model", values: Sequence[str]) -> Command:
    req = s.WithdrawRequest(
        wallet_address=required(values[0], "wallet address"),
        amount=parse_sol(values[1]),
    )

    def call(client: ShadowPay) -> str:
        resp = client.payment.withdraw(req)
        return _join(
            "Withdraw transaction created!",
            f"Blockhash: {resp.recent_blockhash}",
            resp.message,
        )

    return remote(model, "Creating withdraw transaction...", call)


def _payment_prepare(model: "Model", values: Sequence[str]) -> Command:
    req = s.PrepareRequest(
        receiver_commitment=required(values[0], "receiver commitment"),
        amount=parse_sol(values[1]),
    )

    def call(client: ShadowPay) -> str:
        resp = client.payment.prepare(req)
        return _join(
            "Payment prepared!",
            f"Payment Hash: {resp.payment_hash}",
            f"Commitment: {abbreviate(resp.commitment)}",
            resp.message,
        )

    return remote(model, "Preparing payment...", call)


def _payment_authorize(model: "Model", values: Sequence[str]) -> Command:
    req = s.AuthorizeRequest(
        commitment=required(values[0], "commitment"),
        nullifier=required(values[1], "nullifier"),
        amount=parse_sol(values[2]),
        merchant=required(values[3], "merchant wallet"),
    )

    def call(client: ShadowPay) -> str:
        resp = client.payment.authorize(req)
        return _join(
            "Payment authorized!",
            f"Access Token: {abbreviate(resp.access_token)}",
            f"Expires in: {resp.expires_in} seconds",
            resp.message,
        )

    return remote(model, "Authorizing payment...", call)


def _payment_verify(model: "Model", values: Sequence[str]) -> Command:
    token = required(values[0], "access token")

    def call(client: ShadowPay) -> str:
        resp = client.payment.verify_access(token)
        return _join(
            f"Access verification: {outcome(resp.valid, 'Valid ✓', 'Invalid')}",
            f"Merchant: {resp.merchant}",
            f"Amount: {resp.amount}",
            f"Expires: {resp.expires_at}",
            resp.message,
        )

    return remote(model, "Verifying access token...", call)


def _payment_settle(model: "Model", values: Sequence[str]) -> Command:
    header = required(values[0], "payment header")
    resource = required(values[1], "resource")
    merchant = required(values[2], "merchant wallet")
    requirements = s.PaymentRequirements(
        scheme=SETTLE_SCHEME,
        network=SETTLE_NETWORK,
        max_amount_required=str(parse_sol(values[3], "max amount")),
        resource=resource,
        pay_to=merchant,
    )
    req = s.SettleRequest(
        payment_header=header, resource=resource, payment_requirements=requirements
    )

    def call(client: ShadowPay) -> str:
        resp = client.payment.settle(req)
        return _join(
            f"Settle Payment: {outcome(resp.success)}",
            f"Tx Signature: {resp.tx_sig}" if resp.tx_sig else "",
            resp.message,
        )

    return remote(model, "Settling payment...", call)


# --- privacy pool ---------------------------------------------------------------


def _pool_balance(model: "Model", values: Sequence[str]) -> Command:
    wallet = required(values[0], "wallet address")

    def call(client: ShadowPay) -> str:
        resp = client.pool.balance(wallet)
        return _join(
            f"Pool Balance: {sol(resp.balance)} SOL ({resp.balance} lamports)",
            f"Min Deposit: {sol(resp.min_deposit)} SOL",
        )

    return remote(model, "Fetching pool balance...", call)


def _pool_deposit(model: "Model", values: Sequence[str]) -> Command:
    req = s.PoolDepositRequest(
        wallet_address=required(values[0], "wallet address"),
        amount=parse_sol(values[1]),
    )

    def call(client: ShadowPay) -> str:
        resp = client.pool.deposit(req)
        return _join("Pool deposit transaction created!", resp.message)

    return remote(model, "Creating pool deposit...", call)


def _pool_withdraw(model: "Model", values: Sequence[str]) -> Command:
    req = s.PoolWithdrawRequest(
        wallet_address=required(values[0], "wallet address"),
        amount=parse_sol(values[1]),
    )

    def call(client: ShadowPay) -> str:
        resp = client.pool.withdraw(req)
        return _join(
            "Pool withdrawal created!",
            f"Net Amount: {sol(resp.net_amount)} SOL",
            f"Fee: {sol(resp.fee)} SOL",
            resp.message,
        )

    return remote(model, "Creating pool withdrawal...", call)


def _pool_deposit_address(model: "Model", _values: Sequence[str]) -> Command:
    def call(client: ShadowPay) -> str:
        resp = client.pool.deposit_address()
        return _join("Pool Deposit Address:", resp.deposit_address, f"Network: {resp.network}")

    return remote(model, "Fetching deposit address...", call)


# --- tokens ---------------------------------------------------------------------


def _token_list(model: "Model", _values: Sequence[str]) -> Command:
    def call(client: ShadowPay) -> str:
        resp = client.token.list_supported()
        if not resp.tokens:
            return "Supported Tokens: No tokens configured"
        lines = ["Supported Tokens:"]
        for token in resp.tokens:
            status = outcome(token.enabled, "✓ Enabled", "Disabled")
            lines.append(f"• {token.symbol} ({status})")
            lines.append(f"  Mint: {token.mint}")
            lines.append(f"  Decimals: {token.decimals}")
        return _join(*lines)

    return remote(model, "Loading supported tokens...", call)


def _token_add(model: "Model", values: Sequence[str]) -> Command:
    req = s.AddTokenRequest(
        mint=required(values[0], "mint address"),
        symbol=required(values[1], "symbol"),
        decimals=parse_int(values[2], "decimals"),
        enabled=True,
    )

    def call(client: ShadowPay) -> str:
        resp = client.token.add(req)
        return _join(f"Add Token: {outcome(resp.success)}", resp.message)

    return remote(model, "Adding token...", call)


def _token_update(model: "Model", values: Sequence[str]) -> Command:
    mint = required(values[0], "mint address")
    enabled_raw = optional(values[2])
    req = s.UpdateTokenRequest(
        symbol=optional(values[1]),
        enabled=parse_bool(enabled_raw) if enabled_raw is not None else None,
    )

    def call(client: ShadowPay) -> str:
        resp = client.token.update(mint, req)
        return _join(f"Update Token: {outcome(resp.success)}", resp.message)

    return remote(model, "Updating token...", call)


def _token_remove(model: "Model", values: Sequence[str]) -> Command:
    mint = required(values[0], "mint address")

    def call(client: ShadowPay) -> str:
        resp = client.token.remove(mint)
        return _join(f"Remove Token: {outcome(resp.success)}", resp.message)

    return remote(model, "Removing token...", call)


# --- bot authorization ------------------------------------------------------------


def _authorize_spending(model: "Model", values: Sequence[str]) -> Command:
    max_per_tx = values[2].strip()
    max_daily = values[3].strip()
    parse_sol(max_per_tx, "max per tx")
    parse_sol(max_daily, "max daily")
    days = parse_int(values[4], "valid days")
    if days <= 0:
        raise InputError(f"invalid valid days: {days} must be positive")
    req = s.AuthorizeSpendingRequest(
        user_wallet=required(values[0], "user wallet"),
        authorized_service=required(values[1], "authorized service"),
        max_amount_per_tx=max_per_tx,
        max_daily_spend=max_daily,
        valid_until=int(time.time()) + days * SECONDS_PER_DAY,
        user_signature=required(values[5], "user signature"),
    )

    def call(client: ShadowPay) -> str:
        resp = client.authorization.authorize_spending(req)
        return _join(
            f"Authorize Spending: {outcome(resp.success)}",
            f"Authorization ID: {resp.authorization_id}",
            resp.message,
        )

    return remote(model, "Authorizing bot spending...", call)


def _list_authorizations(model: "Model", values: Sequence[str]) -> Command:
    wallet = required(values[0], "wallet address")

    def call(client: ShadowPay) -> str:
        resp = client.authorization.list_for_wallet(wallet)
        if not resp.authorizations:
            return f"Authorizations for {wallet}: No authorizations found"
        lines = [f"Authorizations for {wallet}:"]
        for idx, auth in enumerate(resp.authorizations, start=1):
            lines.extend(
                [
                    f"[{idx}] {outcome(not auth.revoked, 'Active ✓', 'Revoked')}",
                    f"Service: {auth.authorized_service}",
                    f"Max Per Tx: {sol(auth.max_amount_per_tx)} SOL",
                    f"Max Daily: {sol(auth.max_daily_spend)} SOL",
                    f"Spent Today: {sol(auth.spent_today)} SOL",
                    f"Valid Until: {_timestamp(auth.valid_until)}",
                    f"Created: {_timestamp(auth.created_at)}",
                    f"Last Reset: {auth.last_reset_date}",
                ]
            )
        return _join(*lines)

    return remote(model, "Loading authorizations...", call)


def _revoke_authorization(model: "Model", values: Sequence[str]) -> Command:
    req = s.RevokeAuthorizationRequest(
        user_wallet=required(values[0], "user wallet"),
        authorized_service=required(values[1], "authorized service"),
        user_signature=required(values[2], "user signature"),
    )

    def call(client: ShadowPay) -> str:
        resp = client.authorization.revoke(req)
        return _join(
            f"Revoke Authorization: {outcome(resp.success)}",
            f"Authorization ID: {resp.authorization_id}",
            resp.message,
        )

    return remote(model, "Revoking authorization...", call)


# --- merchant ---------------------------------------------------------------------


def _merchant_earnings(model: "Model", _values: Sequence[str]) -> Command:
    def call(client: ShadowPay) -> str:
        resp = client.merchant.earnings()
        lines = [
            "Merchant Earnings:",
            f"Total: {sol(resp.total_earnings)} SOL (${resp.total_usd_value})",
            f"Withdrawable: {sol(resp.withdrawable_sol)} SOL",
            f"Pending: {sol(resp.pending_settlement)} SOL",
            "Token Breakdown:",
        ]
        lines.extend(f"  • {item.symbol}: {sol(item.amount)} SOL" for item in resp.token_breakdown)
        return _join(*lines)

    return remote(model, "Loading earnings...", call)


def _merchant_analytics(model: "Model", values: Sequence[str]) -> Command:
    req = s.AnalyticsRequest(start_date=optional(values[0]), end_date=optional(values[1]))

    def call(client: ShadowPay) -> str:
        resp = client.merchant.analytics(req)
        lines = [
            "Analytics:",
            f"Total Payments: {resp.total_payments}",
            f"Total Volume: {sol(resp.total_volume)} SOL",
            f"Avg Payment: {sol(resp.average_payment)} SOL",
            f"Unique Customers: {resp.unique_customers}",
            f"Success Rate: {resp.success_rate:.1f}%",
            f"Pending: {resp.pending_payments}",
            "Top Resources:",
        ]
        for idx, item in enumerate(resp.top_resources[:MAX_TOP_RESOURCES], start=1):
            lines.append(
                f"  {idx}. {item.resource}: {item.payment_count} payments, "
                f"{sol(item.total_amount)} SOL"
            )
        return _join(*lines)

    return remote(model, "Loading analytics...", call)


def _merchant_withdraw(model: "Model", values: Sequence[str]) -> Command:
    req = s.MerchantWithdrawRequest(
        amount=parse_sol(values[0]), destination=required(values[1], "destination wallet")
    )

    def call(client: ShadowPay) -> str:
        resp = client.merchant.withdraw(req)
        return _join(
            f"Withdraw Earnings: {outcome(resp.success)}",
            f"Withdrawal ID: {resp.withdrawal_id}",
            f"Amount: {sol(resp.amount or req.amount)} SOL",
            f"Fee: {sol(resp.fee)} SOL",
            f"Net: {sol(resp.net_amount)} SOL",
            resp.message,
        )

    return remote(model, "Withdrawing earnings...", call)


def _merchant_decrypt(model: "Model", values: Sequence[str]) -> Command:
    req = s.DecryptRequest(
        ciphertext=required(values[0], "ciphertext"),
        private_key=required(values[1], "private key"),
    )

    def call(client: ShadowPay) -> str:
        resp = client.privacy.decrypt(req)
        return f"Decrypted Amount: {sol(resp.amount)} SOL ({resp.amount} lamports)"

    return remote(model, "Decrypting amount...", call)


# --- webhooks ---------------------------------------------------------------------


def _webhook_register(model: "Model", values: Sequence[str]) -> Command:
    req = s.RegisterWebhookRequest(
        url=required(values[0], "webhook URL"),
        events=split_and_trim(values[1]),
        secret=optional(values[2]),
    )

    def call(client: ShadowPay) -> str:
        resp = client.webhook.register(req)
        return _join(
            f"Register Webhook: {outcome(resp.success)}",
            f"Webhook ID: {resp.webhook_id}",
            f"URL: {resp.url}",
            f"Events: {', '.join(resp.events)}",
            f"Created: {resp.created_at}",
            resp.message,
        )

    return remote(model, "Registering webhook...", call)


def _webhook_config(model: "Model", _values: Sequence[str]) -> Command:
    def call(client: ShadowPay) -> str:
        resp = client.webhook.config()
        return _join(
            "Webhook Configuration:",
            f"Webhook ID: {resp.webhook_id}",
            f"URL: {resp.url}",
            f"Events: {', '.join(resp.events)}",
            f"Status: {outcome(resp.active, 'Active ✓', 'Inactive')}",
            f"Created: {resp.created_at}",
            f"Updated: {resp.updated_at}",
        )

    return remote(model, "Loading webhook configuration...", call)


def _webhook_test(model: "Model", values: Sequence[str]) -> Command:
    req = s.WebhookTestRequest(webhook_id=optional(values[0]), event=optional(values[1]))

    def call(client: ShadowPay) -> str:
        resp = client.webhook.test(req)
        return _join(
            f"Test Webhook: {outcome(resp.success, failed='Failed')}",
            f"Status Code: {resp.status_code}",
            f"Response Time: {resp.response_time_ms} ms",
            resp.message,
            f"Error: {resp.error}" if resp.error else "",
        )

    return remote(model, "Sending test event...", call)


def _webhook_logs(model: "Model", values: Sequence[str]) -> Command:
    limit = DEFAULT_LOG_LIMIT
    if values[1].strip():
        limit = parse_int(values[1], "limit")
        if limit <= 0:
            raise InputError(f"invalid limit: {limit} must be positive")
    req = s.WebhookLogsRequest(webhook_id=optional(values[0]), limit=limit)

    def call(client: ShadowPay) -> str:
        resp = client.webhook.logs(req)
        header = f"Webhook Logs (Total: {resp.total_count}):"
        if not resp.logs:
            return f"{header} No logs found"
        lines = [header]
        for entry in resp.logs[:MAX_LOG_LINES]:
            mark = "✓" if entry.success else "✗"
            lines.append(
                f"{mark} {entry.timestamp} | Event: {entry.event} | Code: {entry.status_code} "
                f"| Time: {entry.response_time_ms}ms | Attempt: {entry.attempt}"
            )
            lines.append(f"   {entry.id}")
        if len(resp.logs) > MAX_LOG_LINES:
            lines.append(f"... and {len(resp.logs) - MAX_LOG_LINES} more")
        return _join(*lines)

    return remote(model, "Loading webhook logs...", call)


def _webhook_stats(model: "Model", _values: Sequence[str]) -> Command:
    def call(client: ShadowPay) -> str:
        resp = client.webhook.stats()
        return _join(
            "Webhook Statistics:",
            f"Total Deliveries: {resp.total_deliveries}",
            f"Successful: {resp.successful_deliveries}",
            f"Failed: {resp.failed_deliveries}",
            f"Success Rate: {resp.success_rate:.1f}%",
            f"Avg Response Time: {resp.average_response_time_ms} ms",
            f"Last Delivery: {resp.last_delivery}",
            f"Last Success: {resp.last_success}",
            f"Last Failure: {resp.last_failure}",
        )

    return remote(model, "Loading webhook statistics...", call)


def _webhook_deactivate(model: "Model", values: Sequence[str]) -> Command:
    req = s.DeactivateWebhookRequest(webhook_id=required(values[0], "webhook ID"))

    def call(client: ShadowPay) -> str:
        resp = client.webhook.deactivate(req)
        return _join(
            f"Deactivate Webhook: {outcome(resp.success)}",
            f"Webhook ID: {resp.webhook_id}",
            resp.message,
        )

    return remote(model, "Deactivating webhook...", call)


# --- ShadowID -----------------------------------------------------------------------


def _identity_auto_register(model: "Model", values: Sequence[str]) -> Command:
    req = s.AutoRegisterRequest(
        wallet_address=required(values[0], "wallet address"),
        signature=required(values[1], "signature"),
        message=values[2].strip(),
    )

    def call(client: ShadowPay) -> str:
        resp = client.shadowid.auto_register(req)
        return _join(
            f"Auto Register: {outcome(resp.success)}",
            f"Commitment: {resp.commitment}",
            f"Leaf Index: {resp.leaf_index}",
            resp.message,
        )

    return remote(model, "Registering ShadowID...", call)


def _identity_register(model: "Model", values: Sequence[str]) -> Command:
    req = s.RegisterCommitmentRequest(commitment=required(values[0], "commitment"))

    def call(client: ShadowPay) -> str:
        resp = client.shadowid.register(req)
        return _join(
            f"Register Commitment: {outcome(resp.success)}",
            f"Leaf Index: {resp.leaf_index}",
            f"Tx Hash: {resp.tx_hash}" if resp.tx_hash else "",
            resp.message,
        )

    return remote(model, "Registering commitment...", call)


def _identity_proof(model: "Model", values: Sequence[str]) -> Command:
    commitment = required(values[0], "commitment")

    def call(client: ShadowPay) -> str:
        resp = client.shadowid.proof(commitment)
        lines = [
            "Merkle Proof:",
            f"Commitment: {abbreviate(resp.commitment)}",
            f"Leaf Index: {resp.leaf_index}",
            f"Root: {abbreviate(resp.root)}",
            f"Proof ({len(resp.proof)} hashes):",
        ]
        for idx, node in enumerate(resp.proof[:MAX_PROOF_HASHES]):
            lines.append(f"  [{idx}] {abbreviate(node)}")
        if len(resp.proof) > MAX_PROOF_HASHES:
            lines.append(f"  ... and {len(resp.proof) - MAX_PROOF_HASHES} more hashes")
        return _join(*lines)

    return remote(model, "Fetching Merkle proof...", call)


def _identity_root(model: "Model", _values: Sequence[str]) -> Command:
    def call(client: ShadowPay) -> str:
        resp = client.shadowid.root()
        return _join(
            "Merkle Tree Root:",
            f"Root: {resp.root}",
            f"Tree Depth: {resp.tree_depth}",
            f"Leaf Count: {resp.leaf_count}",
        )

    return remote(model, "Fetching tree root...", call)


def _identity_status(model: "Model", values: Sequence[str]) -> Command:
    commitment = required(values[0], "commitment")

    def call(client: ShadowPay) -> str:
        resp = client.shadowid.status(commitment)
        return _join(
            f"Registration Status: {outcome(resp.registered, 'Registered ✓', 'Not Registered')}",
            f"Commitment: {abbreviate(resp.commitment or commitment)}",
            f"Leaf Index: {resp.leaf_index}" if resp.registered else "",
        )

    return remote(model, "Checking registration status...", call)


# --- settings -------------------------------------------------------------------------


def _settings_set_api_key(model: "Model", values: Sequence[str]) -> Command:
    api_key = required(values[0], "API key")
    model.apply_settings(model.settings.with_api_key(api_key, "keyring"))

    def body() -> Message:
        try:
            config.store_api_key(api_key)
        except ConfigError as exc:
            return Error(f"Error: {exc}\nThe key is active for this session only.")
        return Success(f"API key saved to keyring: {mask_secret(api_key)}")

    return Command(body=body, label="Saving API key...")


def _settings_set_endpoint(model: "Model", values: Sequence[str]) -> Command:
    base_url = config.validate_base_url(required(values[0], "endpoint"))
    model.apply_settings(model.settings.with_base_url(base_url))
    env_file = model.settings.env_file

    def body() -> Message:
        try:
            config.store_base_url(env_file, base_url)
        except ConfigError as exc:
            return Error(f"Error: {exc}\nThe endpoint is active for this session only.")
        return Success(_join(f"API endpoint set to {base_url}", f"Saved to {env_file}"))

    return Command(body=body, label="Saving API endpoint...")


def _settings_test_connection(model: "Model", _values: Sequence[str]) -> Command:
    settings = model.settings
    transport = model.transport

    def body() -> Message:
        try:
            with ShadowPay(
                settings.api_key,
                base_url=settings.base_url,
                timeout=settings.timeout,
                transport=transport,
            ) as client:
                resp = client.verify.supported()
        except ShadowPayError as exc:
            return error_from(exc)
        schemes = ", ".join(f"{item.scheme} ({item.network})" for item in resp.schemes)
        return Success(
            _join(
                f"Connection OK: {settings.base_url}",
                f"x402 version: {resp.x402_version}",
                f"Schemes: {schemes or 'none advertised'}",
                "" if settings.connected else "API key not set",
            )
        )

    return Command(body=body, label=f"Contacting {settings.base_url}...")


def _settings_clear_api_key(model: "Model", _values: Sequence[str]) -> Command:
    previous_source = model.settings.api_key_source
    model.apply_settings(model.settings.with_api_key("", ""))

    def body() -> Message:
        try:
            removed = config.clear_api_key()
        except ConfigError as exc:
            return error_from(exc)
        text = "API key removed from keyring" if removed else "No API key stored in keyring"
        if previous_source == "env":
            text = _join(text, f"{config.API_KEY_ENV} is still set in the environment")
        return Success(_join(text, "Cleared for this session"))

    return Command(body=body, label="Clearing API key...")


def _op(
    label: str, handler: Handler, title: str = "", fields: Sequence[str] = ()
) -> Operation:
    return Operation(label=label, handler=handler, title=title, fields=tuple(fields))


OPERATIONS: Dict[Tuple[View, int], Operation] = {
    (View.PAYMENT, 0): _op(
        "Deposit Funds", _payment_deposit,
        "Deposit to Payment Account", ["Wallet Address", "Amount (SOL)"],
    ),
    (View.PAYMENT, 1): _op(
        "Withdraw Funds", _payment_withdraw,
        "Withdraw from Payment Account", ["Wallet Address", "Amount (SOL)"],
    ),
    (View.PAYMENT, 2): _op(
        "Prepare Payment", _payment_prepare,
        "Prepare ZK Payment", ["Receiver Commitment", "Amount (SOL)"],
    ),
    (View.PAYMENT, 3): _op(
        "Authorize Payment", _payment_authorize,
        "Authorize Payment", ["Commitment", "Nullifier", "Amount (SOL)", "Merchant Wallet"],
    ),
    (View.PAYMENT, 4): _op(
        "Verify Access", _payment_verify, "Verify Access Token", ["Access Token"],
    ),
    (View.PAYMENT, 5): _op(
        "Settle Payment", _payment_settle,
        "Settle x402 Payment",
        ["Payment Header (base64)", "Resource", "Merchant Wallet", "Max Amount (SOL)"],
    ),
    (View.POOL, 0): _op("Check Balance", _pool_balance, "Check Pool Balance", ["Wallet Address"]),
    (View.POOL, 1): _op(
        "Deposit to Pool", _pool_deposit, "Deposit to Pool", ["Wallet Address", "Amount (SOL)"],
    ),
    (View.POOL, 2): _op(
        "Withdraw from Pool", _pool_withdraw,
        "Withdraw from Pool", ["Wallet Address", "Amount (SOL)"],
    ),
    (View.POOL, 3): _op("Get Deposit Address", _pool_deposit_address),
    (View.TOKEN, 0): _op("List Supported Tokens", _token_list),
    (View.TOKEN, 1): _op(
        "Add New Token", _token_add, "Add Token", ["Mint Address", "Symbol", "Decimals"],
    ),
    (View.TOKEN, 2): _op(
        "Update Token", _token_update,
        "Update Token", ["Mint Address", "New Symbol (optional)", "Enabled (true/false)"],
    ),
    (View.TOKEN, 3): _op("Remove Token", _token_remove, "Remove Token", ["Mint Address"]),
    (View.AUTHORIZATION, 0): _op(
        "Authorize Bot Spending", _authorize_spending,
        "Authorize Bot Spending",
        [
            "User Wallet",
            "Authorized Service",
            "Max Per Tx (SOL)",
            "Max Daily (SOL)",
            "Valid Until (days from now)",
            "User Signature (base58)",
        ],
    ),
    (View.AUTHORIZATION, 1): _op(
        "List Authorizations", _list_authorizations, "List Authorizations", ["Wallet Address"],
    ),
    (View.AUTHORIZATION, 2): _op(
        "Revoke Authorization", _revoke_authorization,
        "Revoke Authorization",
        ["User Wallet", "Authorized Service", "User Signature (base58)"],
    ),
    (View.MERCHANT, 0): _op("View Earnings", _merchant_earnings),
    (View.MERCHANT, 1): _op(
        "Get Analytics", _merchant_analytics,
        "Get Analytics",
        ["Start Date (YYYY-MM-DD, optional)", "End Date (YYYY-MM-DD, optional)"],
    ),
    (View.MERCHANT, 2): _op(
        "Withdraw Earnings", _merchant_withdraw,
        "Withdraw Earnings", ["Amount (SOL)", "Destination Wallet"],
    ),
    (View.MERCHANT, 3): _op(
        "Decrypt Amount", _merchant_decrypt,
        "Decrypt Amount", ["Encrypted Ciphertext (hex)", "Private Key (hex)"],
    ),
    (View.WEBHOOK, 0): _op(
        "Register Webhook", _webhook_register,
        "Register Webhook",
        ["Webhook URL (https://...)", "Events (comma-separated)", "Secret (optional)"],
    ),
    (View.WEBHOOK, 1): _op("Get Configuration", _webhook_config),
    (View.WEBHOOK, 2): _op(
        "Test Webhook", _webhook_test,
        "Test Webhook", ["Webhook ID (optional)", "Event Type (optional)"],
    ),
    (View.WEBHOOK, 3): _op(
        "View Logs", _webhook_logs,
        "View Webhook Logs", ["Webhook ID (optional)", "Limit (default 50)"],
    ),
    (View.WEBHOOK, 4): _op("Get Stats", _webhook_stats),
    (View.WEBHOOK, 5): _op(
        "Deactivate Webhook", _webhook_deactivate, "Deactivate Webhook", ["Webhook ID"],
    ),
    (View.IDENTITY, 0): _op(
        "Auto Register", _identity_auto_register,
        "Auto Register ShadowID", ["Wallet Address", "Signature (base58)", "Message"],
    ),
    (View.IDENTITY, 1): _op(
        "Register Commitment", _identity_register,
        "Register Commitment", ["Poseidon Hash Commitment"],
    ),
    (View.IDENTITY, 2): _op("Get Proof", _identity_proof, "Get Merkle Proof", ["Commitment"]),
    (View.IDENTITY, 3): _op("Get Tree Root", _identity_root),
    (View.IDENTITY, 4): _op(
        "Check Status", _identity_status, "Check Registration Status", ["Commitment"],
    ),
    (View.SETTINGS, 0): _op("Set API Key", _settings_set_api_key, "Set API Key", ["API Key"]),
    (View.SETTINGS, 1): _op(
        "Set API Endpoint", _settings_set_endpoint,
        "Set API Endpoint", ["Endpoint URL (https://...)"],
    ),
    (View.SETTINGS, 2): _op("Test Connection", _settings_test_connection),
    (View.SETTINGS, 3): _op("Clear API Key", _settings_clear_api_key),
}


def lookup(view: View, index: int) -> Optional[Operation]:
    return OPERATIONS.get((view, index))


__all__ = [
    "NOT_CONNECTED",
    "OPERATIONS",
    "Operation",
    "invoke",
    "lookup",
    "optional",
    "parse_bool",
    "parse_int",
    "parse_sol",
    "remote",
    "split_and_trim",
]
