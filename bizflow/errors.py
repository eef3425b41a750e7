# bizflow/errors.py
"""Error kinds surfaced by the billing and referral core.

Every error carries a machine-readable ``kind`` and the HTTP status the API
layer answers with. The API renders them as
``{"success": false, "error": kind, "message": ...}``.
"""
from flask import jsonify
from werkzeug.exceptions import HTTPException


class BillingError(Exception):
    kind = "billing_error"
    status_code = 400

    def __init__(self, message: str | None = None):
        super().__init__(message or self.__class__.__doc__ or self.kind)
        self.message = message or self.__class__.__doc__ or self.kind

    def to_dict(self) -> dict:
        return {"success": False, "error": self.kind, "message": self.message}


class UnknownTierError(BillingError):
    """Unknown subscription tier."""

    kind = "unknown_tier"
    status_code = 400


class NoActiveSubscriptionError(BillingError):
    """No active subscription found."""

    kind = "no_active_subscription"
    status_code = 404


class PaymentRequiredError(BillingError):
    """Payment is required to complete this upgrade."""

    kind = "payment_required"
    status_code = 402


class InsufficientBalanceError(BillingError):
    """Insufficient referral earnings for this withdrawal."""

    kind = "insufficient_balance"
    status_code = 400


class BelowMinimumError(BillingError):
    """Withdrawal amount is below the minimum."""

    kind = "below_minimum"
    status_code = 400


class ExternalServiceError(BillingError):
    """An external service call failed."""

    kind = "external_service_error"
    status_code = 502


class InvalidRequestError(BillingError):
    """Invalid request parameters."""

    kind = "invalid_request"
    status_code = 400

    def __init__(self, message: str | None = None, errors: dict | None = None):
        super().__init__(message)
        self.errors = errors or {}

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.errors:
            data["errors"] = self.errors
        return data


class InvalidTransitionError(BillingError):
    """Invalid status transition."""

    kind = "invalid_transition"
    status_code = 409


def register_error_handlers(app):
    @app.errorhandler(BillingError)
    def handle_billing_error(err):
        if err.status_code >= 500:
            app.logger.error("%s: %s", err.kind, err.message)
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        return jsonify({
            "success": False,
            "error": (err.name or "error").lower().replace(" ", "_"),
            "message": err.description,
        }), err.code
