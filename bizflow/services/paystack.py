import requests
from flask import current_app

from bizflow.errors import ExternalServiceError


def _headers():
    return {
        "Authorization": f"Bearer {current_app.config['PAYSTACK_SECRET_KEY']}",
        "Content-Type": "application/json",
    }


def _url(path: str) -> str:
    base = current_app.config.get("PAYSTACK_BASE_URL", "https://api.paystack.co")
    return base.rstrip("/") + path


def initialize_transaction(email: str, amount: int, reference: str, callback_url: str | None = None) -> str:
    """Open a Paystack charge of ``amount`` kobo and return its authorization URL."""
    payload = {
        "email": email,
        "amount": amount,  # kobo
        "reference": reference,
        "currency": current_app.config.get("CURRENCY", "NGN"),
    }
    if callback_url:
        payload["callback_url"] = callback_url

    try:
        response = requests.post(
            _url("/transaction/initialize"),
            json=payload,
            headers=_headers(),
            timeout=current_app.config.get("PAYSTACK_TIMEOUT", 15),
        )
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        current_app.logger.exception("Paystack initialize failed for %s", reference)
        raise ExternalServiceError(f"Unable to start transaction: {e}") from e

    if not response.ok or not data.get("status"):
        message = data.get("message") or f"HTTP {response.status_code}"
        current_app.logger.error("Paystack initialize rejected %s: %s", reference, message)
        raise ExternalServiceError(f"Unable to start transaction: {message}")

    return data["data"]["authorization_url"]


def verify_transaction(reference: str) -> dict | None:
    """Return the charge data when Paystack reports it successful, else None."""
    try:
        response = requests.get(
            _url("/transaction/verify/" + reference),
            headers=_headers(),
            timeout=current_app.config.get("PAYSTACK_TIMEOUT", 15),
        )
    except requests.RequestException as e:
        current_app.logger.exception("Paystack verify failed for %s", reference)
        raise ExternalServiceError(f"Payment verification failed: {e}") from e

    if response.status_code != 200:
        return None

    data = response.json()
    if data.get("status") is True and (data.get("data") or {}).get("status") == "success":
        return data["data"]

    return None
