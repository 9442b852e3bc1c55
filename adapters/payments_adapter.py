"""
Stripe Connect and Square OAuth: authorization URLs and code exchange.
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote
import logging

import httpx

from app.exceptions import ExternalServiceError, GatewayTimeoutError

logger = logging.getLogger("offleash.adapters.payments")

STRIPE_AUTHORIZE_URL = "https://connect.stripe.com/oauth/authorize"
STRIPE_TOKEN_URL = "https://connect.stripe.com/oauth/token"
SQUARE_BASE_URL = "https://connect.squareup.com"
SQUARE_SANDBOX_BASE_URL = "https://connect.squareupsandbox.com"
SQUARE_SCOPES = [
    "MERCHANT_PROFILE_READ",
    "PAYMENTS_WRITE",
    "PAYMENTS_READ",
    "ORDERS_WRITE",
    "ORDERS_READ",
    "CUSTOMERS_WRITE",
    "CUSTOMERS_READ",
    "ITEMS_READ",
    "ITEMS_WRITE",
]

_client: Optional[httpx.Client] = None


@dataclass(frozen=True)
class ProviderTokens:
    access_token: str
    refresh_token: Optional[str]
    account_id: str


def connect(timeout: float = 30.0):
    global _client
    _client = httpx.Client(timeout=timeout)


def close():
    global _client
    try:
        if _client is not None:
            _client.close()
    except Exception:
        logger.exception("Error closing payments client")
    finally:
        _client = None


def _encode(value: str) -> str:
    return quote(value, safe="-_.~")


def square_base_url(environment: str) -> str:
    return SQUARE_SANDBOX_BASE_URL if environment == "sandbox" else SQUARE_BASE_URL


def stripe_connect_url(client_id: str, redirect_uri: str, state: str) -> str:
    return (
        f"{STRIPE_AUTHORIZE_URL}?response_type=code&client_id={client_id}"
        f"&scope=read_write&redirect_uri={_encode(redirect_uri)}&state={_encode(state)}"
    )


def square_connect_url(application_id: str, redirect_uri: str, state: str, environment: str) -> str:
    return (
        f"{square_base_url(environment)}/oauth2/authorize?client_id={application_id}"
        f"&scope={'+'.join(SQUARE_SCOPES)}&session=false"
        f"&state={_encode(state)}&redirect_uri={_encode(redirect_uri)}"
    )


def _post(url: str, provider: str, **kwargs) -> dict:
    client = _client or httpx.Client(timeout=30.0)
    try:
        resp = client.post(url, **kwargs)
    except httpx.TimeoutException:
        raise GatewayTimeoutError(f"{provider} did not respond in time")
    except httpx.HTTPError as e:
        logger.warning("%s OAuth request failed: %s", provider, e)
        raise ExternalServiceError(f"{provider} request failed")
    finally:
        if client is not _client:
            client.close()

    if resp.status_code >= 400:
        # Body may echo the authorization code; log only the status
        logger.warning("%s OAuth exchange failed with HTTP %s", provider, resp.status_code)
        raise ExternalServiceError(f"{provider} OAuth failed")
    return resp.json()


def exchange_stripe_code(code: str, secret_key: str) -> ProviderTokens:
    body = _post(
        STRIPE_TOKEN_URL,
        "Stripe",
        data={"grant_type": "authorization_code", "code": code, "client_secret": secret_key},
    )
    return ProviderTokens(
        access_token=body["access_token"],
        refresh_token=body.get("refresh_token"),
        account_id=body["stripe_user_id"],
    )


def exchange_square_code(code: str, application_id: str, application_secret: str, environment: str) -> ProviderTokens:
    body = _post(
        f"{square_base_url(environment)}/oauth2/token",
        "Square",
        json={
            "client_id": application_id,
            "client_secret": application_secret,
            "code": code,
            "grant_type": "authorization_code",
        },
    )
    return ProviderTokens(
        access_token=body["access_token"],
        refresh_token=body.get("refresh_token"),
        account_id=body["merchant_id"],
    )
