# bizflow/services/accounts.py
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from bizflow.errors import ExternalServiceError
from bizflow.extensions import db
from bizflow.models import PlanTier, User
from bizflow.services.referral import generate_referral_code, register_referral
from bizflow.services.trial import start_trial
from bizflow.utils import utcnow


def ensure_user_setup(
    user_id: str,
    email: str,
    business_name: str | None = None,
    referral_code: str | None = None,
    now: datetime | None = None,
) -> tuple[User, bool]:
    """Create the profile row for a newly authenticated user.

    Generates their referral code, links them to their referrer and opens
    the trial. Returns ``(user, created)``; an existing profile is returned
    untouched apart from a missing referral code or trial being filled in.
    """
    now = now or utcnow()

    user = db.session.get(User, user_id)
    created = False

    if user is None:
        try:
            user = User(
                id=user_id,
                email=email,
                business_name=(business_name or "").strip() or "My Business",
                subscription_tier=PlanTier.FREE,
                created_at=now,
                updated_at=now,
            )
            user.referral_code = generate_referral_code(user.business_name)
            db.session.add(user)
            db.session.flush()

            register_referral(user, referral_code)
            db.session.commit()
            created = True
        except IntegrityError as e:
            # lost a race with a concurrent setup for the same user
            db.session.rollback()
            user = db.session.get(User, user_id)
            if user is None:
                raise ExternalServiceError(str(e)) from e
        except SQLAlchemyError as e:
            db.session.rollback()
            raise ExternalServiceError(str(e)) from e

        if created:
            current_app.logger.info(
                "User %s set up with referral code %s", user.id, user.referral_code
            )

    if not user.referral_code:
        _backfill_referral_code(user, now)

    start_trial(user.id, now)
    return user, created


def _backfill_referral_code(user: User, now: datetime) -> None:
    """Issue a referral code to a profile created before codes existed."""
    try:
        user.referral_code = generate_referral_code(user.business_name)
        user.updated_at = now
        db.session.commit()
    except IntegrityError as e:
        # a concurrent request got there first, or the code was taken meanwhile
        db.session.rollback()
        db.session.refresh(user)
        if not user.referral_code:
            raise ExternalServiceError(str(e)) from e
        return
    except SQLAlchemyError as e:
        db.session.rollback()
        raise ExternalServiceError(str(e)) from e

    current_app.logger.info("Issued missing referral code %s to user %s", user.referral_code, user.id)
