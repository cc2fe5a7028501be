from __future__ import annotations

import json
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from enum import StrEnum
from pathlib import Path
from typing import Any, Generic, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


class ValidationRule(StrEnum):
    DEFAULT = "default"
    TIME_RANGE = "timeRange"
    BANDS = "bands"
    MODE = "mode"
    CONTACTED_IN_CONTEST = "contactedInContest"
    UNIQUE_CONTACTS_BY_TIME_RANGE = "uniqueContactsByTimeRange"
    EXCHANGE = "exchange"
    MINIMUM_CONTACTS = "minimumContacts"


class ScoringRule(StrEnum):
    DEFAULT = "default"
    TIME_RANGE = "timeRange"
    BONUS_STATIONS = "bonusStations"
    MINIMUM_CONTACTS = "minimumContacts"


class BonusRule(StrEnum):
    DEFAULT = "default"


class TiebreakerRule(StrEnum):
    DEFAULT = "default"
    VALID_STATIONS = "validStations"
    MINIMUM_TIME = "minimumTime"


TRuleName = TypeVar("TRuleName", bound=StrEnum)


class ConfigBase(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class RuleEntry(BaseModel, Generic[TRuleName]):
    """One configured rule: a bare name or a ``[name, params]`` pair."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: TRuleName
    params: Any = None

    @model_validator(mode="before")
    @classmethod
    def coerce_pair(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"name": value}
        if isinstance(value, (list, tuple)):
            if len(value) == 1:
                return {"name": value[0]}
            if len(value) == 2:
                return {"name": value[0], "params": value[1]}
            raise ValueError("rule entries must be a name or a [name, params] pair")
        return value


class RuleSet(ConfigBase):
    validation: list[RuleEntry[ValidationRule]]
    scoring: list[RuleEntry[ScoringRule]]
    bonus: list[RuleEntry[BonusRule]]
    tiebreaker: list[TiebreakerRule] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_params(self) -> RuleSet:
        for entry in self.validation:
            _VALIDATION_PARAM_CHECKS[entry.name](entry.params)
        for entry in self.scoring:
            _SCORING_PARAM_CHECKS[entry.name](entry.params)
        for entry in self.bonus:
            _BONUS_PARAM_CHECKS[entry.name](entry.params)
        return self

    def find_validation(self, name: ValidationRule) -> RuleEntry[ValidationRule] | None:
        return _find(self.validation, name)

    def find_scoring(self, name: ScoringRule) -> RuleEntry[ScoringRule] | None:
        return _find(self.scoring, name)


class RulesConfig(ConfigBase):
    name: str
    start: datetime
    end: datetime
    blacklist: list[str] = Field(default_factory=list)
    allow_missing_participants: bool = False
    non_competing: list[str] = Field(default_factory=list)
    rules: RuleSet

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("name must not be empty")
        return normalized

    @field_validator("start", "end", mode="after")
    @classmethod
    def validate_instants(cls, value: datetime) -> datetime:
        return as_utc(value)

    @field_validator("blacklist", "non_competing")
    @classmethod
    def validate_callsign_lists(cls, value: list[str]) -> list[str]:
        return [callsign.strip() for callsign in value if callsign.strip()]

    @model_validator(mode="after")
    def validate_period(self) -> RulesConfig:
        if self.start > self.end:
            raise ValueError("start must be before or equal to end")
        return self


def parse_rules(payload: Mapping[str, Any] | RulesConfig) -> RulesConfig:
    if isinstance(payload, RulesConfig):
        return payload
    try:
        return RulesConfig.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(f"Invalid rules configuration: {exc}") from exc


def load_rules(path: str | Path) -> RulesConfig:
    raw = Path(path).read_text(encoding="utf-8")
    return parse_rules(_parse_yaml_or_json(raw))


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_instant(value: Any) -> datetime:
    if isinstance(value, datetime):
        return as_utc(value)
    text = str(value).strip()
    if text.endswith("Z"):
        text = f"{text[:-1]}+00:00"
    return as_utc(datetime.fromisoformat(text))


def _find(entries: list[RuleEntry[TRuleName]], name: TRuleName) -> RuleEntry[TRuleName] | None:
    for entry in entries:
        if entry.name == name:
            return entry
    return None


def _parse_yaml_or_json(raw: str) -> dict[str, Any]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        parsed = _parse_yaml(raw)
    if not isinstance(parsed, dict):
        raise ValueError("Rules configuration root must be an object.")
    return parsed


def _parse_yaml(raw: str) -> dict[str, Any]:
    try:
        import yaml  # type: ignore[import-not-found]
    except ModuleNotFoundError as exc:
        raise ValueError(
            "YAML parsing requires PyYAML. Use a JSON rules file or install pyyaml."
        ) from exc

    parsed = yaml.safe_load(raw)
    if not isinstance(parsed, dict):
        raise ValueError("Rules configuration root must be an object.")
    return parsed


def _no_params(params: Any) -> None:
    if params is not None:
        raise ValueError("rule does not take parameters")


def _check_number(value: Any, *, label: str, minimum: float | None = None) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{label} must be a number")
    if minimum is not None and value < minimum:
        raise ValueError(f"{label} must be >= {minimum:g}")
    return value


def _check_numeric_text(value: Any, *, label: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{label} must be numeric")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{label} must be numeric") from exc


def _check_object(params: Any, *, rule: str) -> Mapping[str, Any]:
    if not isinstance(params, Mapping):
        raise ValueError(f"{rule} parameters must be an object")
    return params


def _check_pair(value: Any, *, label: str) -> tuple[Any, Any]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError(f"{label} must be a [start, end] pair")
    return value[0], value[1]


def _check_default_validation(params: Any) -> None:
    if params is None:
        return
    options = _check_object(params, rule="default")
    unknown = set(options) - {"maximumTimeDiff", "maximumFrequencyDiff"}
    if unknown:
        raise ValueError(f"default: unknown parameters {sorted(unknown)}")
    for key, value in options.items():
        _check_number(value, label=f"default.{key}", minimum=0)


def _check_bands(params: Any) -> None:
    bands = _check_object(params, rule="bands")
    if not bands:
        raise ValueError("bands must define at least one band")
    for band, bounds in bands.items():
        low, high = _check_pair(bounds, label=f"bands.{band}")
        low_value = _check_numeric_text(low, label=f"bands.{band} lower bound")
        high_value = _check_numeric_text(high, label=f"bands.{band} upper bound")
        if low_value > high_value:
            raise ValueError(f"bands.{band} lower bound must be <= upper bound")


def _check_modes(params: Any) -> None:
    if not isinstance(params, list) or not all(isinstance(mode, str) for mode in params):
        raise ValueError("mode parameters must be a list of mode names")


def _check_exchange(params: Any) -> None:
    if not isinstance(params, str):
        raise ValueError("exchange parameter must be a regular expression string")
    try:
        re.compile(params)
    except re.error as exc:
        raise ValueError(f"exchange pattern does not compile: {exc}") from exc


def _check_time_ranges(params: Any) -> None:
    ranges = _check_object(params, rule="uniqueContactsByTimeRange")
    if not ranges:
        raise ValueError("uniqueContactsByTimeRange must define at least one range")
    for range_name, bounds in ranges.items():
        start, end = _check_pair(bounds, label=f"uniqueContactsByTimeRange.{range_name}")
        try:
            start_at = parse_instant(start)
            end_at = parse_instant(end)
        except ValueError as exc:
            raise ValueError(
                f"uniqueContactsByTimeRange.{range_name} bounds must be ISO instants"
            ) from exc
        if start_at > end_at:
            raise ValueError(f"uniqueContactsByTimeRange.{range_name} start must be <= end")


def _check_minimum_contacts(params: Any) -> None:
    if isinstance(params, bool) or not isinstance(params, int) or params < 0:
        raise ValueError("minimumContacts requires a non-negative integer threshold")


def _check_optional_number(params: Any) -> None:
    if params is not None:
        _check_number(params, label="default")


def _check_points_by_key(params: Any, *, rule: str) -> None:
    points = _check_object(params, rule=rule)
    for key, value in points.items():
        _check_number(value, label=f"{rule}.{key}")


_VALIDATION_PARAM_CHECKS = {
    ValidationRule.DEFAULT: _check_default_validation,
    ValidationRule.TIME_RANGE: _no_params,
    ValidationRule.BANDS: _check_bands,
    ValidationRule.MODE: _check_modes,
    ValidationRule.CONTACTED_IN_CONTEST: _no_params,
    ValidationRule.UNIQUE_CONTACTS_BY_TIME_RANGE: _check_time_ranges,
    ValidationRule.EXCHANGE: _check_exchange,
    ValidationRule.MINIMUM_CONTACTS: _check_minimum_contacts,
}

_SCORING_PARAM_CHECKS = {
    ScoringRule.DEFAULT: _check_optional_number,
    ScoringRule.TIME_RANGE: lambda params: _check_points_by_key(params, rule="timeRange"),
    ScoringRule.BONUS_STATIONS: lambda params: _check_points_by_key(params, rule="bonusStations"),
    ScoringRule.MINIMUM_CONTACTS: _check_minimum_contacts,
}

_BONUS_PARAM_CHECKS = {
    BonusRule.DEFAULT: _check_optional_number,
}
