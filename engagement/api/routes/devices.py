"""Device registration: store push tokens and record the login that came with them."""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from engagement.core.constants import INACTIVITY_FLAGS
from engagement.db.session import get_db
from engagement.models.user import User
from engagement.services.notifications.tokens import read_push_tokens

router = APIRouter()
logger = logging.getLogger(__name__)


class RegisterDeviceBody(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=128)
    token: str = Field(..., min_length=1, max_length=4096, description="FCM/APNs registration token")


def locked_user_query(db: Session, user_id: str) -> Query:
    """SELECT ... FOR UPDATE on the user row: concurrent registrations for one user apply in turn."""
    return db.query(User).filter(User.id == user_id).with_for_update()


def _lock_or_create_user(db: Session, user_id: str) -> User:
    user = locked_user_query(db, user_id).one_or_none()
    if user is not None:
        return user
    db.add(User(id=user_id, fcm_tokens=[]))
    try:
        db.commit()
    except IntegrityError:
        # Another registration created the row first
        db.rollback()
    return locked_user_query(db, user_id).one()


@router.post("/devices/register")
def register_device(body: RegisterDeviceBody, db: Session = Depends(get_db)):
    """
    Called by the app after push registration. Adds the token to the user's set
    (other devices keep theirs), sets last_login_at = now and clears the inactivity
    flags so the user can be reminded again after a new inactivity stretch.
    """
    user_id = body.user_id.strip()
    token = body.token.strip()
    now = datetime.now(timezone.utc)
    user = _lock_or_create_user(db, user_id)
    tokens = read_push_tokens(user)
    added = token not in tokens
    if added:
        tokens.append(token)
    # Reassign so the JSON column is marked dirty
    user.fcm_tokens = tokens
    user.last_login_at = now
    for flag in INACTIVITY_FLAGS:
        setattr(user, flag, False)
    db.commit()
    if added:
        logger.info("Registered push token for user %s (%s devices)", user_id, len(tokens))
    return {"ok": True, "message": "Token registered" if added else "Token already registered"}
