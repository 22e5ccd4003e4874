from __future__ import annotations

from .base import DateProvider
from .http import HttpDateProvider


def build_provider(name: str, **kwargs) -> DateProvider | None:
    """Provider factory.

    "none" stands for "date extension not installed": resolution still runs
    and every tab ends up undated unless its group title carries a date.
    """
    n = (name or "http").lower()
    if n in ("http", "relay"):
        return HttpDateProvider.from_env(
            user_agent=str(kwargs.get("user_agent", "")),
            timeout_s=float(kwargs.get("timeout_s", 30.0)),
        )
    if n in ("none", "off"):
        return None

    raise ValueError(f"Unsupported date provider: {name} (expected 'http' or 'none')")
