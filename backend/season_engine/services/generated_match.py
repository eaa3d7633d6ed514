from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class GeneratedMatch:
    """
    One generated pairing, before persistence.

    Both team slots None = unresolved knockout placeholder (winner of an
    earlier round, filled in outside the generator).
    """

    round: int
    team_a_id: Optional[int]
    team_b_id: Optional[int]
    scheduled_at: Optional[datetime]

    @property
    def is_placeholder(self) -> bool:
        return self.team_a_id is None and self.team_b_id is None
