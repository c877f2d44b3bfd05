"""HTTP client for the ShadowPay API.

Every method is synchronous: the console runs them inside scheduled commands,
so blocking here never stalls the message loop.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Type, TypeVar
from urllib.parse import quote

import httpx

from . import __version__
from . import schemas as s
from .errors import APIError, DecodeError, TransportError

DEFAULT_BASE_URL = "https://shadow.radr.fun"
DEFAULT_TIMEOUT = 30.0
USER_AGENT = f"shadowpay-console/{__version__}"

T = TypeVar("T", bound=s.Record)

Requester = Callable[..., Dict[str, Any]]


def _segment(value: str) -> str:
    return quote(value, safe="")


class _Service:
    def __init__(self, request: Requester) -> None:
        self._request = request

    def _call(
        self,
        method: str,
        path: str,
        result: Type[T],
        body: Optional[s.Record] = None,
    ) -> T:
        payload = body.to_payload() if body is not None else None
        return result.from_dict(self._request(method, path, payload))


class PaymentService(_Service):
    def deposit(self, req: s.DepositRequest) -> s.DepositResponse:
        return self._call("POST", "/shadowpay/v1/payment/deposit", s.DepositResponse, req)

    def withdraw(self, req: s.WithdrawRequest) -> s.WithdrawResponse:
        return self._call("POST", "/shadowpay/v1/payment/withdraw", s.WithdrawResponse, req)

    def prepare(self, req: s.PrepareRequest) -> s.PrepareResponse:
        return self._call("POST", "/shadowpay/v1/payment/prepare", s.PrepareResponse, req)

    def authorize(self, req: s.AuthorizeRequest) -> s.AuthorizeResponse:
        return self._call("POST", "/shadowpay/v1/payment/authorize", s.AuthorizeResponse, req)

    def verify_access(self, token: str) -> s.VerifyAccessResponse:
        req = s.VerifyAccessRequest(token=token)
        return self._call("GET", "/shadowpay/v1/payment/verify-access", s.VerifyAccessResponse, req)

    def settle(self, req: s.SettleRequest) -> s.SettleResponse:
        return self._call("POST", "/shadowpay/v1/payment/settle", s.SettleResponse, req)


class PoolService(_Service):
    def balance(self, wallet_address: str) -> s.PoolBalanceResponse:
        path = f"/shadowpay/api/pool/balance/{_segment(wallet_address)}"
        return self._call("GET", path, s.PoolBalanceResponse)

    def deposit(self, req: s.PoolDepositRequest) -> s.PoolDepositResponse:
        return self._call("POST", "/shadowpay/api/pool/deposit", s.PoolDepositResponse, req)

    def withdraw(self, req: s.PoolWithdrawRequest) -> s.PoolWithdrawResponse:
        return self._call("POST", "/shadowpay/api/pool/withdraw", s.PoolWithdrawResponse, req)

    def deposit_address(self) -> s.DepositAddressResponse:
        return self._call("GET", "/shadowpay/api/pool/deposit-address", s.DepositAddressResponse)


class TokenService(_Service):
    def list_supported(self) -> s.TokenListResponse:
        return self._call("GET", "/shadowpay/api/tokens/supported", s.TokenListResponse)

    def add(self, req: s.AddTokenRequest) -> s.TokenChangeResponse:
        return self._call("POST", "/shadowpay/api/tokens/add", s.TokenChangeResponse, req)

    def update(self, mint: str, req: s.UpdateTokenRequest) -> s.TokenChangeResponse:
        path = f"/shadowpay/api/tokens/update/{_segment(mint)}"
        return self._call("PATCH", path, s.TokenChangeResponse, req)

    def remove(self, mint: str) -> s.TokenChangeResponse:
        path = f"/shadowpay/api/tokens/remove/{_segment(mint)}"
        return self._call("DELETE", path, s.TokenChangeResponse)


class AuthorizationService(_Service):
    def authorize_spending(self, req: s.AuthorizeSpendingRequest) -> s.AuthorizationChangeResponse:
        return self._call(
            "POST", "/shadowpay/api/authorize-spending", s.AuthorizationChangeResponse, req
        )

    def revoke(self, req: s.RevokeAuthorizationRequest) -> s.AuthorizationChangeResponse:
        return self._call(
            "POST", "/shadowpay/api/revoke-authorization", s.AuthorizationChangeResponse, req
        )

    def list_for_wallet(self, wallet_address: str) -> s.AuthorizationListResponse:
        path = f"/shadowpay/api/my-authorizations/{_segment(wallet_address)}"
        return self._call("GET", path, s.AuthorizationListResponse)


class MerchantService(_Service):
    def earnings(self) -> s.EarningsResponse:
        return self._call("GET", "/shadowpay/api/merchant/earnings", s.EarningsResponse)

    def analytics(self, req: s.AnalyticsRequest) -> s.AnalyticsResponse:
        return self._call("GET", "/shadowpay/api/merchant/analytics", s.AnalyticsResponse, req)

    def withdraw(self, req: s.MerchantWithdrawRequest) -> s.MerchantWithdrawResponse:
        return self._call(
            "POST", "/shadowpay/api/merchant/withdraw", s.MerchantWithdrawResponse, req
        )


class PrivacyService(_Service):
    def decrypt(self, req: s.DecryptRequest) -> s.DecryptResponse:
        return self._call("POST", "/shadowpay/api/privacy/decrypt", s.DecryptResponse, req)


class WebhookService(_Service):
    def register(self, req: s.RegisterWebhookRequest) -> s.RegisterWebhookResponse:
        return self._call(
            "POST", "/shadowpay/api/webhooks/register", s.RegisterWebhookResponse, req
        )

    def config(self) -> s.WebhookConfigResponse:
        return self._call("GET", "/shadowpay/api/webhooks/config", s.WebhookConfigResponse)

    def test(self, req: s.WebhookTestRequest) -> s.WebhookTestResponse:
        return self._call("POST", "/shadowpay/api/webhooks/test", s.WebhookTestResponse, req)

    def logs(self, req: s.WebhookLogsRequest) -> s.WebhookLogsResponse:
        return self._call("GET", "/shadowpay/api/webhooks/logs", s.WebhookLogsResponse, req)

    def stats(self) -> s.WebhookStatsResponse:
        return self._call("GET", "/shadowpay/api/webhooks/stats", s.WebhookStatsResponse)

    def deactivate(self, req: s.DeactivateWebhookRequest) -> s.DeactivateWebhookResponse:
        return self._call(
            "POST", "/shadowpay/api/webhooks/deactivate", s.DeactivateWebhookResponse, req
        )


class ShadowIDService(_Service):
    def auto_register(self, req: s.AutoRegisterRequest) -> s.AutoRegisterResponse:
        return self._call(
            "POST", "/shadowpay/api/shadowid/auto-register", s.AutoRegisterResponse, req
        )

    def register(self, req: s.RegisterCommitmentRequest) -> s.RegisterCommitmentResponse:
        return self._call(
            "POST", "/shadowpay/api/shadowid/register", s.RegisterCommitmentResponse, req
        )

    def proof(self, commitment: str) -> s.ProofResponse:
        req = s.RegisterCommitmentRequest(commitment=commitment)
        return self._call("POST", "/shadowpay/api/shadowid/proof", s.ProofResponse, req)

    def root(self) -> s.RootResponse:
        return self._call("GET", "/shadowpay/api/shadowid/root", s.RootResponse)

    def status(self, commitment: str) -> s.IdentityStatusResponse:
        path = f"/shadowpay/shadowid/v1/id/status/{_segment(commitment)}"
        return self._call("GET", path, s.IdentityStatusResponse)


class VerifyService(_Service):
    def supported(self) -> s.SupportedResponse:
        return self._call("GET", "/shadowpay/supported", s.SupportedResponse)


class ShadowPay:
    """Entry point bundling the per-domain services over one HTTP session."""

    def __init__(
        self,
        api_key: str = "",
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        headers = {"Content-Type": "application/json", "User-Agent": USER_AGENT}
        if api_key:
            headers["X-API-Key"] = api_key
        self._http = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

        self.payment = PaymentService(self._request)
        self.pool = PoolService(self._request)
        self.token = TokenService(self._request)
        self.authorization = AuthorizationService(self._request)
        self.merchant = MerchantService(self._request)
        self.privacy = PrivacyService(self._request)
        self.webhook = WebhookService(self._request)
        self.shadowid = ShadowIDService(self._request)
        self.verify = VerifyService(self._request)

    def __enter__(self) -> "ShadowPay":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def _request(
        self, method: str, path: str, payload: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        try:
            response = self._http.request(method, path, json=payload)
        except httpx.HTTPError as exc:
            raise TransportError(f"request failed: {exc}") from exc

        if response.status_code >= 400:
            raise self._api_error(response)

        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as exc:
            raise DecodeError(f"failed to decode response: {exc}") from exc
        if not isinstance(data, dict):
            raise DecodeError(f"unexpected response body: {type(data).__name__}")
        return data

    @staticmethod
    def _api_error(response: httpx.Response) -> APIError:
        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            return APIError(response.status_code, f"api error: {response.reason_phrase}")
        message = str(body.get("message") or response.reason_phrase)
        detail = body.get("error")
        return APIError(response.status_code, message, str(detail) if detail else None)


__all__ = ["DEFAULT_BASE_URL", "DEFAULT_TIMEOUT", "ShadowPay", "USER_AGENT"]
