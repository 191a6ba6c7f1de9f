import logging
import re
import zipfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Union

import pandas as pd

logger = logging.getLogger(__name__)

# =========================
# Order codes
# =========================
ORDER_CODE_RE = re.compile(r"n\d{3}(?!\d)", re.I)

DEFAULT_TRACKING_PATH = Path(__file__).resolve().parent / "data" / "nibbly_tracking.csv"

TRACKING_COLUMNS = {
    "code": "order_code",
    "location": "location",
    "eta": "eta_minutes",
    "status": "status",
}


class DeliveryStatus(str, Enum):
    PREPARING = "preparing"
    IN_FLIGHT = "in_flight"
    ARRIVING = "arriving"
    DELIVERED = "delivered"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


@dataclass(frozen=True)
class TrackingRecord:
    code: str
    location: str
    eta_minutes: int
    status: DeliveryStatus


def extract_order_code(text: str) -> Optional[str]:
    match = ORDER_CODE_RE.search(text or "")
    return match.group(0).upper() if match else None


# =========================
# Load tracking records (CSV or Excel)
# =========================
def _read_table(path: Path) -> pd.DataFrame:
    if path.suffix.lower() in {".xlsx", ".xlsm"}:
        return pd.read_excel(path, sheet_name=0, engine="openpyxl", dtype=str)
    return pd.read_csv(path, dtype=str, keep_default_na=False)


def load_tracking_records(path: Union[str, Path, None] = None) -> Dict[str, TrackingRecord]:
    """Read order-code tracking data into an immutable-by-convention mapping.

    Problems with the file never raise: a missing or malformed table yields an
    empty mapping (every code then reads as unknown) and bad rows are skipped.
    """
    path = Path(path) if path else DEFAULT_TRACKING_PATH
    try:
        df = _read_table(path)
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        logger.warning("Could not read tracking data from %s: %s", path, e)
        return {}

    df.columns = [str(c).strip().lower() for c in df.columns]
    missing = [c for c in TRACKING_COLUMNS.values() if c not in df.columns]
    if missing:
        logger.warning("Tracking data %s is missing columns %s", path, missing)
        return {}

    df = df.fillna("")
    for col in TRACKING_COLUMNS.values():
        df[col] = df[col].astype(str).str.strip()
    df[TRACKING_COLUMNS["code"]] = df[TRACKING_COLUMNS["code"]].str.upper()
    df = df[(df[TRACKING_COLUMNS["code"]] != "") & (df[TRACKING_COLUMNS["location"]] != "")]

    records: Dict[str, TrackingRecord] = {}
    for _, row in df.iterrows():
        code = row[TRACKING_COLUMNS["code"]]
        if not ORDER_CODE_RE.fullmatch(code):
            logger.warning("Skipping tracking row with malformed order code %r", code)
            continue
        try:
            eta = int(float(row[TRACKING_COLUMNS["eta"]] or 0))
            status = DeliveryStatus(row[TRACKING_COLUMNS["status"]].lower())
        except (ValueError, OverflowError) as e:
            logger.warning("Skipping tracking row %s: %s", code, e)
            continue
        records[code] = TrackingRecord(
            code=code,
            location=row[TRACKING_COLUMNS["location"]],
            eta_minutes=max(eta, 0),
            status=status,
        )

    logger.info("Loaded %d tracking records from %s", len(records), path)
    return records
