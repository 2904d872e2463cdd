"""
Token resolver: users -> one deduplicated, ordered set of device tokens.

fcm_tokens is written by client apps and may be missing or malformed on old rows;
read_push_tokens() treats anything unusable as "no tokens" and logs it instead of
failing the sweep.
"""
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from engagement.models.user import User

logger = logging.getLogger(__name__)

# Stream users in pages so an all-users broadcast does not load the table at once
_ALL_USERS_PAGE_SIZE = 1000


@dataclass
class ResolvedTokens:
    """Deduplicated tokens (first-seen order) and which users own each token."""

    tokens: list[str] = field(default_factory=list)
    owners: dict[str, set[str]] = field(default_factory=dict)

    @property
    def user_ids(self) -> set[str]:
        """Users that contributed at least one valid token."""
        ids: set[str] = set()
        for owner_ids in self.owners.values():
            ids |= owner_ids
        return ids

    def owners_of(self, tokens: Iterable[str]) -> set[str]:
        ids: set[str] = set()
        for token in tokens:
            ids |= self.owners.get(token, set())
        return ids

    def __len__(self) -> int:
        return len(self.tokens)


def read_push_tokens(user: User) -> list[str]:
    """Typed accessor for User.fcm_tokens. Absent or malformed -> []."""
    raw = user.fcm_tokens
    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.warning("User %s has malformed fcm_tokens (%s); skipping", user.id, type(raw).__name__)
        return []
    tokens: list[str] = []
    dropped = 0
    for item in raw:
        if isinstance(item, str) and item.strip():
            tokens.append(item.strip())
        else:
            dropped += 1
    if dropped:
        logger.warning("User %s: dropped %s invalid fcm_tokens entries", user.id, dropped)
    return tokens


def resolve_tokens(users: Iterable[User]) -> ResolvedTokens:
    """Flatten every user's tokens into one set. A token shared by two users is sent once but owned by both."""
    resolved = ResolvedTokens()
    for user in users:
        try:
            user_id = str(user.id)
            tokens = read_push_tokens(user)
        except Exception as e:
            logger.warning("Skipping unreadable user record: %s", e, exc_info=True)
            continue
        for token in tokens:
            owners = resolved.owners.get(token)
            if owners is None:
                resolved.owners[token] = {user_id}
                resolved.tokens.append(token)
            else:
                owners.add(user_id)
    return resolved


def iter_all_users(db: Session) -> Iterator[User]:
    """Every user, streamed. Used for broadcasts (new story, manual)."""
    yield from db.query(User).order_by(User.id).yield_per(_ALL_USERS_PAGE_SIZE)
