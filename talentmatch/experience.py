from typing import Iterable, Optional

from .models import ExperienceRecord


def total_years(records: Optional[Iterable[ExperienceRecord]]) -> float:
    if not records:
        return 0.0
    return sum(record.years for record in records)


class ExperienceMatcher:
    """Pass/fail check of accumulated experience against a required threshold."""

    def match(
        self,
        required_years: Optional[float],
        records: Optional[Iterable[ExperienceRecord]],
    ) -> bool:
        if required_years is None or required_years <= 0:
            return True
        if not records:
            return False
        return total_years(records) >= required_years
