"""
TOML-based configuration for LedgerDecimal.

Loads settings from a TOML file and/or environment variables.
Environment variables take precedence over file values.

Usage:
    from ledgerdecimal.config import load_config
    cfg = load_config("ledgerdecimal.toml")
    root(amount, 3, cfg.root)
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomllib  # type: ignore[import]
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[import,no-redef]

from ledgerdecimal.precision import (
    MAX_ROOT_ITERATIONS,
    PRECISION_MARGIN,
    WORKING_PRECISION,
)


@dataclass
class RootConfig:
    """Newton-Raphson tuning.

    ``margin_bits`` is the relative convergence bound: iteration stops once
    ``|x_k - x_{k-1}| * 2**margin_bits < x_k``.  ``max_iterations`` caps the
    loop; hitting it raises ``NonConvergenceError``.
    """
    margin_bits: int = PRECISION_MARGIN
    max_iterations: int = MAX_ROOT_ITERATIONS

    def validate(self) -> None:
        if not 1 <= self.margin_bits <= WORKING_PRECISION:
            raise ValueError(
                f"margin_bits must be in 1..{WORKING_PRECISION}, got {self.margin_bits}"
            )
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    format: str = "human"   # "human" or "json"
    file: str | None = None


@dataclass
class LedgerDecimalConfig:
    """Top-level configuration container."""
    root: RootConfig = field(default_factory=RootConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _merge(dc: Any, raw: dict[str, Any]) -> None:
    """Merge a raw dict into a dataclass instance (in-place)."""
    for key, value in raw.items():
        key_under = key.replace("-", "_")
        if hasattr(dc, key_under):
            setattr(dc, key_under, value)


def load_config(path: str | None = None) -> LedgerDecimalConfig:
    """
    Load configuration from a TOML file, then overlay environment variables.

    Env-var mapping:
        LEDGERDECIMAL_ROOT_MARGIN   -> root.margin_bits
        LEDGERDECIMAL_ROOT_MAX_ITER -> root.max_iterations
        LEDGERDECIMAL_LOG_LEVEL     -> logging.level
        LEDGERDECIMAL_LOG_FMT       -> logging.format
        LEDGERDECIMAL_LOG_FILE      -> logging.file

    Raises ``ValueError`` if the resulting root settings are out of range.
    """
    cfg = LedgerDecimalConfig()

    # ── TOML file ────────────────────────────────────────────────
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p, "rb") as f:
                data = tomllib.load(f)
            for section_name, section_dc in [
                ("root", cfg.root),
                ("logging", cfg.logging),
            ]:
                if section_name in data:
                    _merge(section_dc, data[section_name])

    # ── Environment variable overrides ───────────────────────────
    if v := os.environ.get("LEDGERDECIMAL_ROOT_MARGIN"):
        cfg.root.margin_bits = int(v)
    if v := os.environ.get("LEDGERDECIMAL_ROOT_MAX_ITER"):
        cfg.root.max_iterations = int(v)
    if v := os.environ.get("LEDGERDECIMAL_LOG_LEVEL"):
        cfg.logging.level = v.upper()
    if v := os.environ.get("LEDGERDECIMAL_LOG_FMT"):
        cfg.logging.format = v
    if v := os.environ.get("LEDGERDECIMAL_LOG_FILE"):
        cfg.logging.file = v

    cfg.root.validate()
    return cfg
