"""Central configuration for the fiscal checker package."""
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timezone
from decimal import Decimal
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"
DEFAULT_STORE_DIR = DATA_DIR / "verifications"

# Document-type tags that may precede an access key ("NFe3524...", "CTe3524...").
KEY_PREFIXES = ("NFE", "CTE")

# CFOP families of returns (devolução) received by the company.
RETURN_CFOP_PREFIXES = ("12", "22")

KEY_COLUMN = "Chave de acesso"
ISSUER_COLUMN = "CNPJ Emitente"
CFOP_COLUMN = "CFOP"
CFOP_DESCRIPTION_COLUMN = "Descricao CFOP"
UNIT_VALUE_COLUMN = "Valor Unitário"


@dataclass(slots=True, frozen=True)
class Settings:
    fixed_asset_threshold: Decimal
    return_cfop_prefixes: tuple[str, ...]
    key_prefixes: tuple[str, ...]
    key_column: str
    issuer_column: str
    cfop_column: str
    cfop_description_column: str
    unit_value_column: str
    store_dir: Path
    timezone: timezone.__class__
    log_level: str


def load_settings() -> Settings:
    store_dir = os.environ.get("FISCAL_CHECKER_STORE_DIR")
    return Settings(
        fixed_asset_threshold=Decimal("1200.00"),
        return_cfop_prefixes=RETURN_CFOP_PREFIXES,
        key_prefixes=KEY_PREFIXES,
        key_column=KEY_COLUMN,
        issuer_column=ISSUER_COLUMN,
        cfop_column=CFOP_COLUMN,
        cfop_description_column=CFOP_DESCRIPTION_COLUMN,
        unit_value_column=UNIT_VALUE_COLUMN,
        store_dir=Path(store_dir) if store_dir else DEFAULT_STORE_DIR,
        timezone=timezone.utc,
        log_level=os.environ.get("FISCAL_CHECKER_LOG_LEVEL", "INFO").upper(),
    )


SETTINGS = load_settings()
