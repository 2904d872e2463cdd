"""
Engagement notifications: who to notify (eligibility), where (tokens), how (batching,
dispatch) and remembering it (tracker). sweeps wires them together per trigger.
"""
from engagement.services.notifications.sweeps import (
    SweepOutcome,
    run_inactivity_sweep,
    run_new_story_sweep,
    send_manual_broadcast,
)

__all__ = [
    "SweepOutcome",
    "run_inactivity_sweep",
    "run_new_story_sweep",
    "send_manual_broadcast",
]
