"""Screens of the operator console and the menu items each one lists."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Tuple


class View(Enum):
    MAIN_MENU = "main"
    PAYMENT = "payment"
    POOL = "pool"
    TOKEN = "token"
    AUTHORIZATION = "authorization"
    MERCHANT = "merchant"
    WEBHOOK = "webhook"
    IDENTITY = "identity"
    SETTINGS = "settings"


BACK = "Back"
EXIT = "Exit"

MENU_ITEMS: Dict[View, Tuple[str, ...]] = {
    View.MAIN_MENU: (
        "ZK Payments",
        "Privacy Pool",
        "Token Management",
        "Bot Authorization",
        "Merchant Tools",
        "Webhooks",
        "ShadowID",
        "Settings",
        EXIT,
    ),
    View.PAYMENT: (
        "Deposit Funds",
        "Withdraw Funds",
        "Prepare Payment",
        "Authorize Payment",
        "Verify Access",
        "Settle Payment",
        BACK,
    ),
    View.POOL: (
        "Check Balance",
        "Deposit to Pool",
        "Withdraw from Pool",
        "Get Deposit Address",
        BACK,
    ),
    View.TOKEN: (
        "List Supported Tokens",
        "Add New Token",
        "Update Token",
        "Remove Token",
        BACK,
    ),
    View.AUTHORIZATION: (
        "Authorize Bot Spending",
        "List Authorizations",
        "Revoke Authorization",
        BACK,
    ),
    View.MERCHANT: (
        "View Earnings",
        "Get Analytics",
        "Withdraw Earnings",
        "Decrypt Amount",
        BACK,
    ),
    View.WEBHOOK: (
        "Register Webhook",
        "Get Configuration",
        "Test Webhook",
        "View Logs",
        "Get Stats",
        "Deactivate Webhook",
        BACK,
    ),
    View.IDENTITY: (
        "Auto Register",
        "Register Commitment",
        "Get Proof",
        "Get Tree Root",
        "Check Status",
        BACK,
    ),
    View.SETTINGS: (
        "Set API Key",
        "Set API Endpoint",
        "Test Connection",
        "Clear API Key",
        BACK,
    ),
}

# Main menu position -> destination view. Positions not listed are Exit.
MAIN_MENU_TARGETS: Tuple[View, ...] = (
    View.PAYMENT,
    View.POOL,
    View.TOKEN,
    View.AUTHORIZATION,
    View.MERCHANT,
    View.WEBHOOK,
    View.IDENTITY,
    View.SETTINGS,
)

TITLES: Dict[View, str] = {
    View.MAIN_MENU: "ShadowPay Console",
    View.PAYMENT: "ZK Payments",
    View.POOL: "Privacy Pool",
    View.TOKEN: "Token Management",
    View.AUTHORIZATION: "Bot Authorization",
    View.MERCHANT: "Merchant Tools",
    View.WEBHOOK: "Webhooks",
    View.IDENTITY: "ShadowID",
    View.SETTINGS: "Settings",
}

TAGLINES: Dict[View, str] = {
    View.PAYMENT: "Select an operation:",
    View.POOL: (
        "Privacy pools mix your funds with other users for maximum anonymity on-chain."
    ),
    View.TOKEN: "Manage SPL tokens:",
    View.AUTHORIZATION: (
        "Allow bots and services to spend from your escrow with custom limits and expiration."
    ),
    View.MERCHANT: "Merchant operations:",
    View.WEBHOOK: "Webhook operations:",
    View.IDENTITY: (
        "Anonymous identity system using Merkle trees for privacy-preserving authentication."
    ),
    View.SETTINGS: "Configure how the console reaches the ShadowPay API:",
}

# Views reachable without an API key.
OPEN_VIEWS = frozenset({View.MAIN_MENU, View.SETTINGS})


def items_for(view: View) -> Tuple[str, ...]:
    return MENU_ITEMS[view]


def last_index(view: View) -> int:
    return len(MENU_ITEMS[view]) - 1


def main_menu_target(index: int) -> Optional[View]:
    """Return the view opened by main menu ``index`` or ``None`` for Exit."""

    if 0 <= index < len(MAIN_MENU_TARGETS):
        return MAIN_MENU_TARGETS[index]
    return None


__all__ = [
    "BACK",
    "EXIT",
    "MAIN_MENU_TARGETS",
    "MENU_ITEMS",
    "OPEN_VIEWS",
    "TAGLINES",
    "TITLES",
    "View",
    "items_for",
    "last_index",
    "main_menu_target",
]
