from enum import Enum
from typing import Optional

from app.core.errors import InvalidTransition


class ParticipationStatus(str, Enum):
    joined = "joined"
    attended = "attended"
    cancelled = "cancelled"


# None stands for "eligible": no participation row yet
ALLOWED_TRANSITIONS = {
    None: {ParticipationStatus.joined},
    ParticipationStatus.joined: {ParticipationStatus.attended, ParticipationStatus.cancelled},
    ParticipationStatus.attended: set(),
    ParticipationStatus.cancelled: set(),
}

ACTIVE_STATUSES = (ParticipationStatus.joined.value, ParticipationStatus.attended.value)


def check_transition(current: Optional[str], target: ParticipationStatus) -> None:
    state = ParticipationStatus(current) if current is not None else None
    if target not in ALLOWED_TRANSITIONS[state]:
        label = state.value if state else "eligible"
        raise InvalidTransition(f"Cannot move participation from '{label}' to '{target.value}'")
