from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from tripfilter.filters.max_limit import MaxLimitReachedSubscriber
from tripfilter.model.itinerary_io import parse_timestamp

logger = logging.getLogger(__name__)

DEFAULT_GROUP_BY_P = 0.68
DEFAULT_APPROXIMATE_MIN_LIMIT = 3
DEFAULT_MAX_LIMIT = 20

_YAML_KEYS = (
    "arrive_by",
    "group_by_p",
    "approximate_min_limit",
    "max_limit",
    "latest_departure_time",
    "remove_transit_with_higher_cost_than_best_on_street_only",
    "short_transit_slack_seconds",
    "debug",
)


def _parse_bool(value: object, label: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "yes", "1", "on"}:
        return True
    if isinstance(value, str) and value.strip().lower() in {"false", "no", "0", "off"}:
        return False
    raise ValueError(f"{label} must be a boolean, got {value!r}")


def _parse_int(value: object, label: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{label} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{label} must be an integer, got {value!r}") from exc


@dataclass(frozen=True)
class FilterChainConfig:
    """Resolved filter-chain options captured when the chain is built.

    ``short_transit_slack_seconds`` of ``None`` means the time-table variation
    filter is not configured.
    """

    arrive_by: bool = False
    group_by_p: float = DEFAULT_GROUP_BY_P
    approximate_min_limit: int = DEFAULT_APPROXIMATE_MIN_LIMIT
    max_limit: int = DEFAULT_MAX_LIMIT
    latest_departure_time: Optional[datetime] = None
    remove_transit_with_higher_cost_than_best_on_street_only: bool = True
    short_transit_slack_seconds: Optional[int] = None
    debug: bool = False
    max_limit_reached_subscriber: Optional[MaxLimitReachedSubscriber] = None

    @property
    def max_limit_enabled(self) -> bool:
        return self.max_limit >= self.approximate_min_limit

    @property
    def time_table_variation_enabled(self) -> bool:
        return self.short_transit_slack_seconds is not None and int(self.short_transit_slack_seconds) > 0

    def with_overrides(self, **changes: object) -> "FilterChainConfig":
        """Copy with the non-``None`` entries of ``changes`` applied."""
        return replace(self, **{key: value for key, value in changes.items() if value is not None})

    # --------------------------------------------------------------------- I/O --
    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "FilterChainConfig":
        if not isinstance(data, Mapping):
            raise TypeError("Filter chain config must be a mapping")
        unknown = sorted(set(data) - set(_YAML_KEYS))
        if unknown:
            logger.warning("Ignoring unknown filter chain config keys: %s", ", ".join(unknown))

        kwargs: Dict[str, object] = {}
        if "arrive_by" in data:
            kwargs["arrive_by"] = _parse_bool(data["arrive_by"], "arrive_by")
        if "group_by_p" in data:
            try:
                kwargs["group_by_p"] = float(data["group_by_p"])
            except (TypeError, ValueError) as exc:
                raise ValueError(f"group_by_p must be a number, got {data['group_by_p']!r}") from exc
        if "approximate_min_limit" in data:
            kwargs["approximate_min_limit"] = _parse_int(
                data["approximate_min_limit"], "approximate_min_limit"
            )
        if "max_limit" in data:
            kwargs["max_limit"] = _parse_int(data["max_limit"], "max_limit")
        if data.get("latest_departure_time") is not None:
            kwargs["latest_departure_time"] = parse_timestamp(
                data["latest_departure_time"], "latest_departure_time"
            )
        key = "remove_transit_with_higher_cost_than_best_on_street_only"
        if key in data:
            kwargs[key] = _parse_bool(data[key], key)
        if data.get("short_transit_slack_seconds") is not None:
            kwargs["short_transit_slack_seconds"] = _parse_int(
                data["short_transit_slack_seconds"], "short_transit_slack_seconds"
            )
        if "debug" in data:
            kwargs["debug"] = _parse_bool(data["debug"], "debug")
        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "FilterChainConfig":
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Filter chain YAML not found at {config_path}")
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        if not isinstance(data, Mapping):
            raise TypeError("Filter chain YAML must contain a mapping at the top level")
        return cls.from_mapping(data)

    def to_mapping(self) -> Dict[str, object]:
        output: Dict[str, object] = {
            "arrive_by": self.arrive_by,
            "group_by_p": float(self.group_by_p),
            "approximate_min_limit": int(self.approximate_min_limit),
            "max_limit": int(self.max_limit),
            "remove_transit_with_higher_cost_than_best_on_street_only": (
                self.remove_transit_with_higher_cost_than_best_on_street_only
            ),
            "debug": self.debug,
        }
        if self.latest_departure_time is not None:
            output["latest_departure_time"] = self.latest_departure_time.isoformat()
        if self.short_transit_slack_seconds is not None:
            output["short_transit_slack_seconds"] = int(self.short_transit_slack_seconds)
        return output

    def to_yaml(self, path: str | Path) -> None:
        dest = Path(path)
        dest.parent.mkdir(parents=True, exist_ok=True)
        with dest.open("w", encoding="utf-8") as handle:
            yaml.safe_dump(self.to_mapping(), handle, sort_keys=True)


__all__ = [
    "DEFAULT_APPROXIMATE_MIN_LIMIT",
    "DEFAULT_GROUP_BY_P",
    "DEFAULT_MAX_LIMIT",
    "FilterChainConfig",
]
