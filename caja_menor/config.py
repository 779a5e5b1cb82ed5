"""Configuration management for the petty-cash tool.

This module centralizes all configuration values including paths,
defaults, and environment variable overrides.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Tuple

# Base project root - assumes this file is in caja_menor/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("CAJA_MENOR_DATA_DIR", _PROJECT_ROOT / "data"))
REPORTS_DIR = DATA_DIR / "reports"

# One JSON document per ledger
CAJA_FILE = DATA_DIR / "caja_menor.json"
REGISTROS_FILE = DATA_DIR / "registros.json"

# Money rules (Colombian pesos, no fractional unit)
INITIAL_FUND = int(os.getenv("CAJA_MENOR_INITIAL_FUND", "4000000"))
RECORD_CEILING = int(os.getenv("CAJA_MENOR_RECORD_CEILING", "200000"))

BILL_DENOMINATIONS: Tuple[int, ...] = (100000, 50000, 20000, 10000, 5000, 2000, 1000)
COIN_DENOMINATIONS: Tuple[int, ...] = (1000, 500, 200, 100, 50)
PARCEL_FEES: Tuple[int, ...] = (18000, 11000)

OLDEST_BATCH_SIZE = 10
TIMESTAMP_FORMAT = "%d/%m/%Y, %H:%M:%S"

LOG_LEVEL = os.getenv("CAJA_MENOR_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, REPORTS_DIR]:
        directory.mkdir(parents=True, exist_ok=True)


def get_caja_path() -> Path:
    """Path of the categorized ledger document."""
    return CAJA_FILE


def get_registros_path() -> Path:
    """Path of the simple ledger document."""
    return REGISTROS_FILE


def configure_logging(level: str | None = None) -> None:
    """Install a basic root handler unless the host already configured one."""
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format=LOG_FORMAT,
    )
