from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from .config import RulesConfig, ValidationRule, parse_instant
from .contact_fields import parse_frequency


@dataclass(frozen=True, slots=True)
class TimeWindow:
    start: datetime
    end: datetime

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end


@dataclass(frozen=True, slots=True)
class BandRange:
    low: Decimal
    high: Decimal

    def contains(self, frequency: Decimal) -> bool:
        return self.low <= frequency <= self.high


@dataclass(frozen=True, slots=True)
class RuleContext:
    rules: RulesConfig
    contest_start: datetime
    contest_end: datetime
    time_windows: dict[str, TimeWindow] = field(default_factory=dict)
    band_ranges: dict[str, BandRange] = field(default_factory=dict)
    blacklist: frozenset[str] = frozenset()
    non_competing: frozenset[str] = frozenset()

    def window_for(self, instant: datetime) -> str | None:
        for name, window in self.time_windows.items():
            if window.contains(instant):
                return name
        return None

    def band_for(self, frequency: Decimal) -> str | None:
        for name, band_range in self.band_ranges.items():
            if band_range.contains(frequency):
                return name
        return None


def build_rule_context(rules: RulesConfig) -> RuleContext:
    return RuleContext(
        rules=rules,
        contest_start=rules.start,
        contest_end=rules.end,
        time_windows=_build_time_windows(rules),
        band_ranges=_build_band_ranges(rules),
        blacklist=frozenset(rules.blacklist),
        non_competing=frozenset(rules.non_competing),
    )


def _build_time_windows(rules: RulesConfig) -> dict[str, TimeWindow]:
    entry = rules.rules.find_validation(ValidationRule.UNIQUE_CONTACTS_BY_TIME_RANGE)
    if entry is None or not entry.params:
        return {}
    return {
        name: TimeWindow(start=parse_instant(start), end=parse_instant(end))
        for name, (start, end) in entry.params.items()
    }


def _build_band_ranges(rules: RulesConfig) -> dict[str, BandRange]:
    entry = rules.rules.find_validation(ValidationRule.BANDS)
    if entry is None or not entry.params:
        return {}
    ranges: dict[str, BandRange] = {}
    for name, (low, high) in entry.params.items():
        low_value = parse_frequency(low)
        high_value = parse_frequency(high)
        if low_value is None or high_value is None:
            raise ValueError(f"band {name} has non-numeric bounds")
        ranges[name] = BandRange(low=low_value, high=high_value)
    return ranges
