"""Configuration models for the spending pipeline.

All knobs the pipeline reads live on :class:`DashboardConfig`: the column
mapping for raw rows, the sign policy, the thresholds of the category share
chart and the span cutoffs of the time series. Defaults reproduce the
reference dashboard behavior.

A configuration file is plain JSON with the same shape as the models::

    {
      "columns": {"date": "Posted", "desc": "Payee", "amount": "Amt", "category": null},
      "flip_signs": true,
      "category_pie": {"min_share": 0.03}
    }

:func:`load_config` reads it from an explicit path or from the
``SPEND_ANALYSIS_CONFIG`` environment variable.
"""

from __future__ import annotations

import os
from os import PathLike
from pathlib import Path

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

CONFIG_ENV_VAR = "SPEND_ANALYSIS_CONFIG"


class ConfigError(ValueError):
    """Raised when a configuration file cannot be read or validated."""


class ColumnMapping(BaseModel):
    """Names of the raw-row columns the normalizer reads.

    ``category`` may be ``None`` for exports that carry no category column;
    every row then receives the ``"(Uncategorized)"`` sentinel.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    date: str = "Date"
    desc: str = "Description"
    amount: str = "Amount"
    category: str | None = "Category"


class CategoryPieConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    min_share: float = 0.05
    max_slices: int = 8
    other_label: str = "Other"

    @field_validator("other_label")
    @classmethod
    def _other_label_non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("other_label must be non-empty")
        return v


class TimeSeriesConfig(BaseModel):
    """Span cutoffs (in days) that select the bucketing granularity.

    The 45-day daily cutoff of the older dashboard build is available by
    setting ``daily_max_span_days=45``.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    daily_max_span_days: int = Field(default=60, ge=1)
    weekly_max_span_days: int = Field(default=180, ge=1)
    # When False, credits count against spend in daily buckets as they do in
    # weekly and monthly ones.
    daily_positive_only: bool = True

    @field_validator("weekly_max_span_days")
    @classmethod
    def _weekly_after_daily(cls, v: int, info: ValidationInfo) -> int:
        daily = info.data.get("daily_max_span_days")
        if daily is not None and v < daily:
            raise ValueError("weekly_max_span_days must be >= daily_max_span_days")
        return v


class DashboardConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    columns: ColumnMapping = Field(default_factory=ColumnMapping)
    ignore_rows: int = Field(default=0, ge=0)
    flip_signs: bool = False
    abs_amounts: bool = False
    category_pie: CategoryPieConfig = Field(default_factory=CategoryPieConfig)
    time_series: TimeSeriesConfig = Field(default_factory=TimeSeriesConfig)
    top_n: int = Field(default=10, ge=1)
    categorize_from_description: bool = False


def load_config(path: str | PathLike[str] | None = None) -> DashboardConfig:
    """Load a :class:`DashboardConfig` from JSON.

    Resolution order: explicit ``path``, then ``SPEND_ANALYSIS_CONFIG``, then
    built-in defaults. Raises :class:`ConfigError` when a named file is missing
    or fails validation.
    """

    if path is None:
        env_val = os.getenv(CONFIG_ENV_VAR)
        if not env_val or not env_val.strip():
            return DashboardConfig()
        path = env_val.strip()

    p = Path(path).expanduser()
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read config file {p}: {exc}") from exc
    try:
        return DashboardConfig.model_validate_json(text)
    except ValidationError as exc:
        raise ConfigError(f"invalid config file {p}: {exc}") from exc


__all__ = [
    "CONFIG_ENV_VAR",
    "CategoryPieConfig",
    "ColumnMapping",
    "ConfigError",
    "DashboardConfig",
    "TimeSeriesConfig",
    "load_config",
]
