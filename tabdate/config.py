from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .date.types import UNDATED_PLACEMENTS, UndatedPlacement

RELOAD_TIMEOUT_S = 15.0


@dataclass(frozen=True)
class ResolvePolicy:
    """Controls how long resolution waits on tabs that are still loading."""

    # Each unloaded tab is reloaded and given this long to finish before its
    # dates are requested anyway.
    reload_timeout_s: float = RELOAD_TIMEOUT_S


@dataclass(frozen=True)
class GroupingConfig:
    """Settings for the group-by-date command.

    - undated_placement: where tabs without a date go when sorting
      ("start", "end" or "preserve").
    - provider: which date provider to build ("http" or "none").
    """

    undated_placement: UndatedPlacement = "end"
    reload_timeout_s: float = RELOAD_TIMEOUT_S
    provider: str = "http"

    def __post_init__(self) -> None:
        if self.undated_placement not in UNDATED_PLACEMENTS:
            raise ValueError(
                f"Unsupported undated placement: {self.undated_placement} (expected one of {', '.join(UNDATED_PLACEMENTS)})"
            )
        if self.reload_timeout_s <= 0:
            raise ValueError(f"Reload timeout must be positive: {self.reload_timeout_s}")

    @classmethod
    def from_env(cls) -> "GroupingConfig":
        load_dotenv()
        placement = os.environ.get("TABDATE_UNDATED_PLACEMENT", "").strip().lower() or "end"
        timeout_raw = os.environ.get("TABDATE_RELOAD_TIMEOUT_S", "").strip()
        provider = os.environ.get("TABDATE_PROVIDER", "").strip().lower() or "http"
        try:
            timeout_s = float(timeout_raw) if timeout_raw else RELOAD_TIMEOUT_S
        except ValueError:
            raise ValueError(f"TABDATE_RELOAD_TIMEOUT_S must be a number: {timeout_raw!r}") from None
        return cls(undated_placement=placement, reload_timeout_s=timeout_s, provider=provider)  # type: ignore[arg-type]

    def resolve_policy(self) -> ResolvePolicy:
        return ResolvePolicy(reload_timeout_s=self.reload_timeout_s)
