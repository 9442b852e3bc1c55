"""
GitHub issue creation for user feedback.
"""

from typing import List, Optional
import logging

import httpx

from app.exceptions import ExternalServiceError

logger = logging.getLogger("offleash.adapters.github")

GITHUB_ISSUES_URL = "https://api.github.com/repos/{repo}/issues"

_client: Optional[httpx.Client] = None
_repo: Optional[str] = None


def connect(token: Optional[str], repo: Optional[str], timeout: float = 10.0):
    global _client, _repo
    if not (token and repo):
        logger.info("GitHub token not configured; feedback is accepted without filing issues")
        return
    _repo = repo
    _client = httpx.Client(
        timeout=timeout,
        headers={
            "Authorization": f"Bearer {token}",
            "User-Agent": "OFFLEASH-App",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        },
    )
    logger.info("GitHub adapter ready for %s", repo)


def close():
    global _client, _repo
    try:
        if _client is not None:
            _client.close()
    except Exception:
        logger.exception("Error closing GitHub client")
    finally:
        _client = None
        _repo = None


def is_available() -> bool:
    return _client is not None


def create_issue(title: str, body: str, labels: List[str]) -> Optional[dict]:
    """
    Open an issue and return the decoded response, or None when the body
    could not be read.

    Raises:
        ExternalServiceError: The adapter is not configured, the request
            failed or GitHub answered with an error status
    """
    if not is_available():
        raise ExternalServiceError("GitHub is not configured", code="GITHUB_UNAVAILABLE")

    try:
        resp = _client.post(
            GITHUB_ISSUES_URL.format(repo=_repo),
            json={"title": title, "body": body, "labels": labels},
        )
    except httpx.HTTPError as e:
        logger.warning("GitHub request failed: %s", e)
        raise ExternalServiceError("Failed to submit feedback", code="GITHUB_ERROR")

    if resp.status_code >= 400:
        logger.warning("GitHub error %s", resp.status_code)
        raise ExternalServiceError("Failed to submit feedback", code="GITHUB_ERROR")

    try:
        return resp.json()
    except ValueError:
        logger.warning("GitHub issue created but the response was not JSON")
        return None
