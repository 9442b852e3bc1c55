"""
Twilio SMS delivery. Message bodies may carry sign-in codes and are never logged.
"""

from typing import Optional
import logging

import httpx

logger = logging.getLogger("offleash.adapters.sms")

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"

_client: Optional[httpx.Client] = None
_account_sid: Optional[str] = None
_auth_token: Optional[str] = None
_from_number: Optional[str] = None


def connect(account_sid: Optional[str], auth_token: Optional[str], from_number: Optional[str], timeout: float = 10.0):
    global _client, _account_sid, _auth_token, _from_number
    if not (account_sid and auth_token and from_number):
        logger.info("Twilio not configured; SMS delivery disabled")
        return
    _account_sid, _auth_token, _from_number = account_sid, auth_token, from_number
    _client = httpx.Client(timeout=timeout)
    logger.info("SMS adapter ready")


def close():
    global _client, _account_sid, _auth_token, _from_number
    try:
        if _client is not None:
            _client.close()
    except Exception:
        logger.exception("Error closing SMS client")
    finally:
        _client = None
        _account_sid = _auth_token = _from_number = None


def is_available() -> bool:
    return _client is not None


def send_sms(to_phone: str, body: str) -> bool:
    """Send a text message. Returns False when delivery is disabled or fails."""
    if not is_available():
        logger.warning("SMS requested but Twilio is not configured")
        return False

    try:
        resp = _client.post(
            TWILIO_MESSAGES_URL.format(sid=_account_sid),
            auth=(_account_sid, _auth_token),
            data={"To": to_phone, "From": _from_number, "Body": body},
        )
    except httpx.HTTPError as e:
        logger.warning("Twilio request failed: %s", e)
        return False

    if resp.status_code >= 400:
        logger.warning("Twilio error %s", resp.status_code)
        return False
    return True
