from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class ReminderOutcome(BaseModel):
    record_id: Optional[str] = None
    email_sent: bool = False
    marked: bool = False
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class SweepResult(BaseModel):
    window_start: str
    window_end: str
    outcomes: List[ReminderOutcome] = []

    @property
    def count(self) -> int:
        return len(self.outcomes)

    @property
    def sent(self) -> int:
        return sum(1 for o in self.outcomes if o.email_sent)

    @property
    def failures(self) -> List[ReminderOutcome]:
        return [o for o in self.outcomes if o.failed]
