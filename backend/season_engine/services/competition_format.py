"""
Competition Format Resolution

Normalizes the loosely shaped competition settings stored on a season (or
sent by a caller) into one explicit CompetitionFormat value.

Accepted shapes (all optional, first match wins):
- format:    raw["format"] | raw["regularSeason"] | raw
             type key: "type" | "format" | raw["formatType"] | raw["type"]
- schedule:  raw["schedule"] | raw
             keys: "cadence", "startDate" | "startAt", "customDates"
- playoffs:  raw["playoffs"] | raw["postseason"] | None
             keys: "enabled", "type", "teams", "seeding"

Missing optional fields never raise; every substituted default is reported in
ResolvedFormat.applied_defaults. Only a missing config object or a value that
cannot be parsed (cadence, dates, integers) is a caller error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


class CompetitionConfigError(ValueError):
    """Raised when the competition config is absent or cannot be parsed."""

    pass


class FormatType(str, Enum):
    straight_round_robin = "straight_round_robin"
    round_robin_double_split = "round_robin_double_split"
    round_robin_triple_split = "round_robin_triple_split"
    round_robin_quadruple_split = "round_robin_quadruple_split"
    semi_round_robins = "semi_round_robins"
    extended = "extended"
    single_elimination = "single_elimination"
    double_elimination = "double_elimination"
    multi_level = "multi_level"


ELIMINATION_FORMATS = frozenset({FormatType.single_elimination, FormatType.double_elimination})


class Cadence(str, Enum):
    weekly = "weekly"
    fortnightly = "fortnightly"
    monthly = "monthly"
    bimonthly = "bimonthly"
    custom = "custom"


CADENCE_DAYS: Dict[Cadence, int] = {
    Cadence.weekly: 7,
    Cadence.fortnightly: 14,
    Cadence.monthly: 30,
    Cadence.bimonthly: 60,
    Cadence.custom: 7,
}


class PlayoffType(str, Enum):
    single_elimination = "single_elimination"
    double_elimination = "double_elimination"


class SeedingMode(str, Enum):
    record = "record"
    points = "points"
    points_for = "points_for"
    manual = "manual"


STANDINGS_SEEDING_MODES = frozenset({SeedingMode.record.value, SeedingMode.points.value, SeedingMode.points_for.value})


@dataclass(frozen=True)
class ScheduleWarning:
    """Lenient default applied during generation; surfaced to callers, never fatal."""

    code: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code, "message": self.message}


@dataclass(frozen=True)
class ScheduleConfig:
    cadence: Cadence = Cadence.weekly
    start_date: Optional[datetime] = None
    custom_dates: Optional[Tuple[datetime, ...]] = None

    @property
    def cadence_days(self) -> int:
        return CADENCE_DAYS[self.cadence]


@dataclass(frozen=True)
class PlayoffConfig:
    enabled: bool = False
    type: PlayoffType = PlayoffType.single_elimination
    teams: int = 0
    # Kept as the raw string so the seeder can detect values outside SeedingMode
    seeding: str = SeedingMode.record.value

    @property
    def team_count(self) -> int:
        """Teams entering the bracket; a bracket needs at least 2."""
        return max(2, self.teams)

    @property
    def is_manual(self) -> bool:
        return self.seeding == SeedingMode.manual.value


@dataclass(frozen=True)
class CompetitionFormat:
    format_type: FormatType = FormatType.straight_round_robin
    legs: int = 1
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    playoffs: Optional[PlayoffConfig] = None

    @property
    def playoffs_enabled(self) -> bool:
        return self.playoffs is not None and self.playoffs.enabled


@dataclass
class ResolvedFormat:
    format: CompetitionFormat
    applied_defaults: List[str] = field(default_factory=list)
    warnings: List[ScheduleWarning] = field(default_factory=list)


# ============================================================================
# Value parsing
# ============================================================================


def parse_timestamp(value: Any, field_name: str) -> datetime:
    """Parse an ISO-8601 date or datetime into an aware UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise CompetitionConfigError(f"{field_name}: invalid date value {value!r}") from e
    else:
        raise CompetitionConfigError(f"{field_name}: invalid date value {value!r}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _parse_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise CompetitionConfigError(f"{field_name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise CompetitionConfigError(f"{field_name} must be an integer, got {value!r}") from e


def _first_present(source: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if source.get(key) is not None:
            return source[key]
    return None


def _as_mapping(value: Any) -> Optional[Mapping[str, Any]]:
    return value if isinstance(value, Mapping) else None


# ============================================================================
# Resolver
# ============================================================================


def resolve_competition_format(raw: Optional[Mapping[str, Any]]) -> ResolvedFormat:
    """
    Normalize a loosely shaped competition config into a CompetitionFormat.

    Raises:
        CompetitionConfigError: config missing, or a present value fails to parse
    """
    if raw is None:
        raise CompetitionConfigError("Missing season competition settings")
    if not isinstance(raw, Mapping):
        raise CompetitionConfigError(f"Competition settings must be an object, got {type(raw).__name__}")

    applied_defaults: List[str] = []
    warnings: List[ScheduleWarning] = []

    fmt_src = _as_mapping(raw.get("format")) or _as_mapping(raw.get("regularSeason")) or raw
    schedule_src = _as_mapping(raw.get("schedule")) or raw
    playoffs_src = _as_mapping(raw.get("playoffs")) or _as_mapping(raw.get("postseason"))

    # Format type
    raw_type = _first_present(fmt_src, "type", "format")
    if raw_type is None:
        raw_type = _first_present(raw, "formatType", "type")
    if raw_type is None or isinstance(raw_type, Mapping):
        format_type = FormatType.straight_round_robin
        applied_defaults.append("formatType")
    else:
        try:
            format_type = FormatType(str(raw_type))
        except ValueError:
            format_type = FormatType.straight_round_robin
            warnings.append(
                ScheduleWarning(
                    code="UNKNOWN_FORMAT_TYPE",
                    message=f"Unknown format type {raw_type!r}; using straight_round_robin",
                )
            )

    # Legs
    raw_legs = fmt_src.get("legs")
    if raw_legs is None:
        legs = 1
        applied_defaults.append("legs")
    else:
        legs = max(1, _parse_int(raw_legs, "legs"))

    schedule = _resolve_schedule(schedule_src, applied_defaults)
    playoffs = _resolve_playoffs(playoffs_src, applied_defaults, warnings) if playoffs_src is not None else None

    for warning in warnings:
        logger.warning("Competition format: %s", warning.message)

    return ResolvedFormat(
        format=CompetitionFormat(format_type=format_type, legs=legs, schedule=schedule, playoffs=playoffs),
        applied_defaults=applied_defaults,
        warnings=warnings,
    )


def _resolve_schedule(source: Mapping[str, Any], applied_defaults: List[str]) -> ScheduleConfig:
    raw_cadence = source.get("cadence")
    if raw_cadence is None:
        cadence = Cadence.weekly
        applied_defaults.append("schedule.cadence")
    else:
        try:
            cadence = Cadence(str(raw_cadence))
        except ValueError as e:
            allowed = ", ".join(c.value for c in Cadence)
            raise CompetitionConfigError(f"cadence must be one of {allowed}, got {raw_cadence!r}") from e

    raw_start = _first_present(source, "startDate", "startAt")
    start_date = parse_timestamp(raw_start, "startDate") if raw_start is not None else None
    if start_date is None:
        applied_defaults.append("schedule.startDate")

    raw_custom = source.get("customDates")
    custom_dates: Optional[Tuple[datetime, ...]] = None
    if isinstance(raw_custom, (list, tuple)):
        custom_dates = tuple(parse_timestamp(d, f"customDates[{i}]") for i, d in enumerate(raw_custom))

    return ScheduleConfig(cadence=cadence, start_date=start_date, custom_dates=custom_dates)


def _resolve_playoffs(
    source: Mapping[str, Any], applied_defaults: List[str], warnings: List[ScheduleWarning]
) -> PlayoffConfig:
    raw_type = source.get("type")
    if raw_type is None:
        playoff_type = PlayoffType.single_elimination
        applied_defaults.append("playoffs.type")
    else:
        try:
            playoff_type = PlayoffType(str(raw_type))
        except ValueError:
            playoff_type = PlayoffType.single_elimination
            warnings.append(
                ScheduleWarning(
                    code="UNKNOWN_PLAYOFF_TYPE",
                    message=f"Unknown playoff type {raw_type!r}; using single_elimination",
                )
            )

    raw_teams = source.get("teams")
    if raw_teams is None:
        teams = 0
        applied_defaults.append("playoffs.teams")
    else:
        teams = _parse_int(raw_teams, "playoffs.teams")

    raw_seeding = source.get("seeding")
    if raw_seeding is None:
        seeding = SeedingMode.record.value
        applied_defaults.append("playoffs.seeding")
    else:
        seeding = str(raw_seeding)

    return PlayoffConfig(
        enabled=bool(source.get("enabled")),
        type=playoff_type,
        teams=teams,
        seeding=seeding,
    )
