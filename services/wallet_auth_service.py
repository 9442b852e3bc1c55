"""
Sign-In with Ethereum (EIP-4361).

The server issues a nonce inside a human-readable message; the wallet signs it
with ``personal_sign`` (EIP-191) and the signer address is recovered from the
signature with eth-account.
"""

from datetime import datetime, timedelta
from typing import Optional
import logging
import re
import secrets

from eth_account import Account
from eth_account.messages import encode_defunct
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import OffleashError, ServiceValidationError, UnauthorizedError
from core.timezones import utcnow
from domain.enums import AuthProvider
from domain.models import UserIdentity, WalletChallenge
from domain.schemas.auth_schemas import (
    AuthResponse,
    WalletChallengeRequest,
    WalletChallengeResponse,
    WalletVerifyRequest,
)
from repositories import IdentityRepository, UserRepository, WalletChallengeRepository
from services.auth_service import AuthService

logger = logging.getLogger("offleash.wallet_auth")

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")
CHALLENGE_TTL = timedelta(minutes=10)
CHAIN_ID = 1


def normalize_address(address: str) -> str:
    address = (address or "").strip()
    if not ADDRESS_PATTERN.match(address):
        raise ServiceValidationError("Invalid wallet address", code="INVALID_WALLET_ADDRESS")
    return address.lower()


def _iso(value: datetime) -> str:
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def build_siwe_message(
    domain: str, address: str, org_slug: str, nonce: str, issued_at: datetime, expires_at: datetime
) -> str:
    return (
        f"{domain} wants you to sign in with your Ethereum account:\n"
        f"{address}\n"
        "\n"
        f"Sign in to {org_slug} on OFFLEASH\n"
        "\n"
        f"URI: https://{domain}\n"
        "Version: 1\n"
        f"Chain ID: {CHAIN_ID}\n"
        f"Nonce: {nonce}\n"
        f"Issued At: {_iso(issued_at)}\n"
        f"Expiration Time: {_iso(expires_at)}"
    )


def extract_nonce(message: str) -> Optional[str]:
    for line in message.splitlines():
        if line.startswith("Nonce:"):
            return line[len("Nonce:"):].strip()
    return None


def recover_signer(message: str, signature: str) -> str:
    try:
        return Account.recover_message(encode_defunct(text=message), signature=signature)
    except Exception as e:
        # eth-account raises several types for malformed signatures
        logger.info("Wallet signature rejected: %s", e)
        raise UnauthorizedError("Invalid signature", code="INVALID_SIGNATURE")


class WalletAuthService:
    @staticmethod
    def create_challenge(db: Session, data: WalletChallengeRequest) -> WalletChallengeResponse:
        address = normalize_address(data.wallet_address)
        org = AuthService.get_active_org(db, data.org_slug)

        nonce = secrets.token_hex(16)
        issued_at = utcnow()
        expires_at = issued_at + CHALLENGE_TTL
        try:
            db.add(WalletChallenge(wallet_address=address, nonce=nonce, expires_at=expires_at))
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Error storing wallet challenge")
            raise

        message = build_siwe_message(settings.app_domain, address, org.slug, nonce, issued_at, expires_at)
        return WalletChallengeResponse(message=message, nonce=nonce)

    @staticmethod
    def verify(db: Session, data: WalletVerifyRequest) -> AuthResponse:
        address = normalize_address(data.wallet_address)
        org = AuthService.get_active_org(db, data.org_slug)
        repo = WalletChallengeRepository(db)

        challenge = repo.get_active(address, utcnow())
        if challenge is None:
            raise UnauthorizedError("No active challenge for this wallet", code="INVALID_CHALLENGE")

        if extract_nonce(data.message) != challenge.nonce:
            raise UnauthorizedError("Nonce mismatch", code="INVALID_CHALLENGE")

        signer = recover_signer(data.message, data.signature)
        if signer.lower() != address:
            logger.warning("wallet_signature_mismatch")
            raise UnauthorizedError("Signature does not match wallet address", code="INVALID_SIGNATURE")

        try:
            repo.delete_for_address(address)

            identity = IdentityRepository(db).get_by_provider(AuthProvider.WALLET, address)
            user = UserRepository(db).get_by_id(identity.user_id) if identity else None
            if user is None:
                user, _ = AuthService.create_member(
                    db,
                    org,
                    email=f"{address}@wallet.offleash.app",
                    first_name="Wallet",
                    last_name="User",
                )
                db.add(
                    UserIdentity(
                        user_id=user.id,
                        provider=AuthProvider.WALLET,
                        provider_user_id=address,
                    )
                )
                logger.info(f"wallet_user_created user_id={user.id} org={org.slug}")
            db.commit()
            db.refresh(user)
        except OffleashError:
            db.rollback()
            raise
        except Exception:
            db.rollback()
            logger.exception("Error completing wallet sign-in")
            raise

        return AuthService.build_auth_response(db, user)
