"""
Centralized constants for the scheduler and notification sweeps.

Change job IDs, cadences or copy here instead of scattering literals across main and services.
"""
from dataclasses import dataclass

# Provider-imposed ceiling on tokens per multicast request (FCM sendEachForMulticast)
MAX_BATCH_SIZE = 500

# Manual broadcasts only reach the first N deduplicated tokens (operator safety ceiling)
MANUAL_BROADCAST_MAX_TOKENS = 500

# New-story sweep: runs every 60 min, looks back 65 min so items near a boundary are not skipped
NEW_STORIES_INTERVAL_MINUTES = 60
NEW_STORIES_WINDOW_MINUTES = 65

# Scheduler job IDs (must match ids used in register_engagement_jobs)
INACTIVE_5_DAYS_JOB_ID = "inactive_5_days"
INACTIVE_20_DAYS_JOB_ID = "inactive_20_days"
NEW_STORIES_JOB_ID = "new_stories"

NEW_STORY_TITLE = "Nova História Chegou! 📖"
NEW_STORY_BODY = 'Venha ler "{title}" e outras novidades.'
NEW_STORY_FALLBACK_TITLE = "Nova História"


@dataclass(frozen=True)
class InactivityRule:
    """One inactivity threshold: who is eligible, which flag gates it, when it runs, what it says."""

    name: str
    days: int
    flag: str  # User column set to true once notified
    hour: int
    minute: int
    title: str
    body: str
    job_id: str


INACTIVE_5_DAYS = InactivityRule(
    name="5_days",
    days=5,
    flag="notified_5_days",
    hour=10,
    minute=0,
    title="Sentimos sua falta! 😢",
    body="Faz 5 dias que não te vemos. Venha ler uma nova história!",
    job_id=INACTIVE_5_DAYS_JOB_ID,
)

INACTIVE_20_DAYS = InactivityRule(
    name="20_days",
    days=20,
    flag="notified_20_days",
    hour=11,
    minute=0,
    title="Tudo bem com você? 🙏",
    body="Faz um tempo que você não entra. Temos muitas novidades!",
    job_id=INACTIVE_20_DAYS_JOB_ID,
)

INACTIVITY_RULES = (INACTIVE_5_DAYS, INACTIVE_20_DAYS)

# Flags cleared when a user logs in again
INACTIVITY_FLAGS = tuple(rule.flag for rule in INACTIVITY_RULES)
