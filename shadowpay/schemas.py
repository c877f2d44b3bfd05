"""Typed request and response records exchanged with the ShadowPay API.

Field names mirror the JSON keys used on the wire. Amounts are integers in
lamports unless a field explicitly documents SOL strings.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Type, TypeVar

LAMPORTS_PER_SOL = 1_000_000_000

R = TypeVar("R", bound="Record")


class Record:
    """Mixin giving dataclasses JSON (de)serialisation helpers."""

    # Maps list-valued field names to the record type of their items.
    nested: ClassVar[Dict[str, Type["Record"]]] = {}
    # Maps attribute names to wire keys where they differ.
    aliases: ClassVar[Dict[str, str]] = {}

    @classmethod
    def from_dict(cls: Type[R], payload: Optional[Mapping[str, Any]]) -> R:
        data = dict(payload or {})
        kwargs: Dict[str, Any] = {}
        for item in fields(cls):  # type: ignore[arg-type]
            key = cls.aliases.get(item.name, item.name)
            if key not in data or data[key] is None:
                continue
            value = data[key]
            child = cls.nested.get(item.name)
            if child is not None and isinstance(value, list):
                value = [child.from_dict(entry) for entry in value if isinstance(entry, Mapping)]
            kwargs[item.name] = value
        return cls(**kwargs)

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON body, dropping unset optional values."""

        raw = asdict(self)  # type: ignore[call-overload]
        return {
            self.aliases.get(key, key): value
            for key, value in raw.items()
            if value is not None
        }


def lamports_to_sol(amount: int) -> float:
    return amount / LAMPORTS_PER_SOL


# --- Payments ---------------------------------------------------------------


@dataclass
class DepositRequest(Record):
    wallet_address: str
    amount: int


@dataclass
class DepositResponse(Record):
    unsigned_tx_base64: str = ""
    recent_blockhash: str = ""
    last_valid_block_height: int = 0


@dataclass
class WithdrawRequest(Record):
    wallet_address: str
    amount: int


@dataclass
class WithdrawResponse(Record):
    unsigned_tx_base64: str = ""
    recent_blockhash: str = ""
    last_valid_block_height: int = 0
    message: str = ""


@dataclass
class PrepareRequest(Record):
    receiver_commitment: str
    amount: int
    token_mint: Optional[str] = None


@dataclass
class PrepareResponse(Record):
    payment_hash: str = ""
    transaction: str = ""
    commitment: str = ""
    message: str = ""


@dataclass
class AuthorizeRequest(Record):
    commitment: str
    nullifier: str
    amount: int
    merchant: str


@dataclass
class AuthorizeResponse(Record):
    success: bool = False
    access_token: str = ""
    expires_in: int = 0
    message: str = ""


@dataclass
class VerifyAccessRequest(Record):
    token: str


@dataclass
class VerifyAccessResponse(Record):
    valid: bool = False
    commitment: str = ""
    merchant: str = ""
    amount: int = 0
    expires_at: str = ""
    message: str = ""


@dataclass
class PaymentRequirements(Record):
    scheme: str
    network: str
    max_amount_required: str
    resource: str
    pay_to: str
    description: str = ""
    mime_type: str = "application/json"
    max_timeout_seconds: int = 60

    aliases: ClassVar[Dict[str, str]] = {
        "max_amount_required": "maxAmountRequired",
        "pay_to": "payTo",
        "mime_type": "mimeType",
        "max_timeout_seconds": "maxTimeoutSeconds",
    }


@dataclass
class SettleRequest(Record):
    payment_header: str
    resource: str
    payment_requirements: PaymentRequirements
    x402_version: int = 1

    aliases: ClassVar[Dict[str, str]] = {
        "x402_version": "x402Version",
        "payment_header": "paymentHeader",
        "payment_requirements": "paymentRequirements",
    }

    def to_payload(self) -> Dict[str, Any]:
        return {
            "x402Version": self.x402_version,
            "paymentHeader": self.payment_header,
            "resource": self.resource,
            "paymentRequirements": self.payment_requirements.to_payload(),
        }


@dataclass
class SettleResponse(Record):
    success: bool = False
    tx_sig: str = ""
    message: str = ""


@dataclass
class Scheme(Record):
    scheme: str = ""
    network: str = ""
    description: str = ""


@dataclass
class SupportedResponse(Record):
    x402_version: int = 0
    schemes: List[Scheme] = field(default_factory=list)

    nested: ClassVar[Dict[str, Type[Record]]] = {"schemes": Scheme}
    aliases: ClassVar[Dict[str, str]] = {"x402_version": "x402Version"}


# --- Privacy pool -----------------------------------------------------------


@dataclass
class PoolBalanceResponse(Record):
    wallet_address: str = ""
    balance: int = 0
    min_deposit: int = 0


@dataclass
class PoolDepositRequest(Record):
    wallet_address: str
    amount: int


@dataclass
class PoolDepositResponse(Record):
    transaction: str = ""
    message: str = ""


@dataclass
class PoolWithdrawRequest(Record):
    wallet_address: str
    amount: int


@dataclass
class PoolWithdrawResponse(Record):
    transaction: str = ""
    net_amount: int = 0
    fee: int = 0
    message: str = ""


@dataclass
class DepositAddressResponse(Record):
    deposit_address: str = ""
    network: str = ""


# --- Tokens -----------------------------------------------------------------


@dataclass
class Token(Record):
    mint: str = ""
    symbol: str = ""
    decimals: int = 0
    enabled: bool = False


@dataclass
class TokenListResponse(Record):
    tokens: List[Token] = field(default_factory=list)

    nested: ClassVar[Dict[str, Type[Record]]] = {"tokens": Token}


@dataclass
class AddTokenRequest(Record):
    mint: str
    symbol: str
    decimals: int
    enabled: bool = True


@dataclass
class UpdateTokenRequest(Record):
    enabled: Optional[bool] = None
    symbol: Optional[str] = None
    decimals: Optional[int] = None


@dataclass
class TokenChangeResponse(Record):
    success: bool = False
    message: str = ""


# --- Bot authorization ------------------------------------------------------


@dataclass
class AuthorizeSpendingRequest(Record):
    user_wallet: str
    authorized_service: str
    max_amount_per_tx: str
    max_daily_spend: str
    valid_until: int
    user_signature: str


@dataclass
class RevokeAuthorizationRequest(Record):
    user_wallet: str
    authorized_service: str
    user_signature: str


@dataclass
class AuthorizationChangeResponse(Record):
    success: bool = False
    message: str = ""
    authorization_id: int = 0


@dataclass
class Authorization(Record):
    id: int = 0
    user_wallet: str = ""
    authorized_service: str = ""
    max_amount_per_tx: int = 0
    max_daily_spend: int = 0
    spent_today: int = 0
    last_reset_date: str = ""
    valid_until: int = 0
    revoked: bool = False
    created_at: int = 0


@dataclass
class AuthorizationListResponse(Record):
    authorizations: List[Authorization] = field(default_factory=list)

    nested: ClassVar[Dict[str, Type[Record]]] = {"authorizations": Authorization}


# --- Merchant ---------------------------------------------------------------


@dataclass
class TokenEarnings(Record):
    token_mint: str = ""
    symbol: str = ""
    amount: int = 0
    usd_value: str = ""


@dataclass
class EarningsResponse(Record):
    total_earnings: int = 0
    total_usd_value: str = ""
    token_breakdown: List[TokenEarnings] = field(default_factory=list)
    withdrawable_sol: int = 0
    pending_settlement: int = 0

    nested: ClassVar[Dict[str, Type[Record]]] = {"token_breakdown": TokenEarnings}


@dataclass
class AnalyticsRequest(Record):
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    interval: Optional[str] = None


@dataclass
class ResourceStat(Record):
    resource: str = ""
    payment_count: int = 0
    total_amount: int = 0


@dataclass
class AnalyticsResponse(Record):
    total_payments: int = 0
    total_volume: int = 0
    average_payment: int = 0
    unique_customers: int = 0
    top_resources: List[ResourceStat] = field(default_factory=list)
    success_rate: float = 0.0
    pending_payments: int = 0

    nested: ClassVar[Dict[str, Type[Record]]] = {"top_resources": ResourceStat}


@dataclass
class MerchantWithdrawRequest(Record):
    amount: int
    destination: str
    token_mint: Optional[str] = None


@dataclass
class MerchantWithdrawResponse(Record):
    success: bool = False
    transaction: str = ""
    withdrawal_id: str = ""
    amount: int = 0
    fee: int = 0
    net_amount: int = 0
    message: str = ""


@dataclass
class DecryptRequest(Record):
    ciphertext: str
    private_key: str


@dataclass
class DecryptResponse(Record):
    amount: int = 0


# --- Webhooks ---------------------------------------------------------------


@dataclass
class RegisterWebhookRequest(Record):
    url: str
    events: List[str]
    secret: Optional[str] = None


@dataclass
class RegisterWebhookResponse(Record):
    success: bool = False
    webhook_id: str = ""
    url: str = ""
    events: List[str] = field(default_factory=list)
    created_at: str = ""
    message: str = ""


@dataclass
class WebhookConfigResponse(Record):
    webhook_id: str = ""
    url: str = ""
    events: List[str] = field(default_factory=list)
    active: bool = False
    created_at: str = ""
    updated_at: str = ""


@dataclass
class WebhookTestRequest(Record):
    webhook_id: Optional[str] = None
    event: Optional[str] = None


@dataclass
class WebhookTestResponse(Record):
    success: bool = False
    status_code: int = 0
    response_time_ms: int = 0
    message: str = ""
    error: str = ""


@dataclass
class WebhookLogEntry(Record):
    id: str = ""
    webhook_id: str = ""
    event: str = ""
    status_code: int = 0
    response_time_ms: int = 0
    success: bool = False
    attempt: int = 0
    timestamp: str = ""
    error: str = ""


@dataclass
class WebhookLogsRequest(Record):
    webhook_id: Optional[str] = None
    limit: Optional[int] = None


@dataclass
class WebhookLogsResponse(Record):
    logs: List[WebhookLogEntry] = field(default_factory=list)
    total_count: int = 0
    limit: int = 0
    offset: int = 0

    nested: ClassVar[Dict[str, Type[Record]]] = {"logs": WebhookLogEntry}


@dataclass
class WebhookStatsResponse(Record):
    webhook_id: str = ""
    total_deliveries: int = 0
    successful_deliveries: int = 0
    failed_deliveries: int = 0
    success_rate: float = 0.0
    average_response_time_ms: int = 0
    last_delivery: str = ""
    last_success: str = ""
    last_failure: str = ""


@dataclass
class DeactivateWebhookRequest(Record):
    webhook_id: str


@dataclass
class DeactivateWebhookResponse(Record):
    success: bool = False
    webhook_id: str = ""
    message: str = ""


# --- ShadowID ---------------------------------------------------------------


@dataclass
class AutoRegisterRequest(Record):
    wallet_address: str
    signature: str
    message: str


@dataclass
class AutoRegisterResponse(Record):
    success: bool = False
    commitment: str = ""
    leaf_index: int = 0
    message: str = ""


@dataclass
class RegisterCommitmentRequest(Record):
    commitment: str


@dataclass
class RegisterCommitmentResponse(Record):
    success: bool = False
    leaf_index: int = 0
    tx_hash: str = ""
    message: str = ""


@dataclass
class ProofResponse(Record):
    commitment: str = ""
    leaf_index: int = 0
    proof: List[str] = field(default_factory=list)
    root: str = ""


@dataclass
class RootResponse(Record):
    root: str = ""
    tree_depth: int = 0
    leaf_count: int = 0


@dataclass
class IdentityStatusResponse(Record):
    commitment: str = ""
    registered: bool = False
    leaf_index: int = 0
