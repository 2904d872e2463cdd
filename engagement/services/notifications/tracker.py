"""
Idempotency tracker: remember "already notified for threshold X" per user.

Two policies (FLAG_MODE):
  confirmed  flag users owning at least one token the provider reported as sent
  all        flag every user that contributed a token, whatever the chunk outcome
Users that contributed no valid token are never flagged in either mode.
"""
import logging
from datetime import datetime

from sqlalchemy.orm import Session

from engagement.models.user import User
from engagement.services.notifications.dispatch import DispatchReport
from engagement.services.notifications.tokens import ResolvedTokens

logger = logging.getLogger(__name__)

FLAG_MODE_CONFIRMED = "confirmed"
FLAG_MODE_ALL = "all"

# Bound the IN (...) list per UPDATE statement
_UPDATE_PAGE_SIZE = 500


def users_to_flag(resolved: ResolvedTokens, report: DispatchReport, mode: str = FLAG_MODE_CONFIRMED) -> set[str]:
    if mode == FLAG_MODE_ALL:
        return resolved.user_ids
    if mode == FLAG_MODE_CONFIRMED:
        return resolved.owners_of(report.delivered_tokens)
    raise ValueError(f"Unknown flag mode: {mode}")


def mark_notified(db: Session, user_ids: set[str], flag: str, cutoff: datetime | None = None) -> int:
    """
    Set `flag` true for user_ids with bulk UPDATEs of up to 500 ids (caller commits). Returns rows updated.
    With `cutoff`, only users still last seen at or before it are flagged: a login during the
    sweep resets the flag and must not be overwritten.
    """
    if not user_ids:
        return 0
    column = getattr(User, flag)
    ids = sorted(user_ids)
    updated = 0
    for i in range(0, len(ids), _UPDATE_PAGE_SIZE):
        q = db.query(User).filter(User.id.in_(ids[i:i + _UPDATE_PAGE_SIZE]))
        if cutoff is not None:
            q = q.filter(User.last_login_at <= cutoff)
        updated += q.update({column: True}, synchronize_session=False)
    logger.debug("Marked %s users %s=true", updated, flag)
    return updated
