import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

DATA_DIR = Path(os.environ.get("SUBTRACKER_DATA_DIR", BASE_DIR / "data"))
SEED_FILE = Path(os.environ.get("SUBTRACKER_SEED", DATA_DIR / "seed.json"))

LOG_LEVEL = os.environ.get("SUBTRACKER_LOG_LEVEL", "INFO").upper()
# Empty means console only
LOG_FILE = os.environ.get("SUBTRACKER_LOG_FILE", "")

# Upper bound on interval advances per schedule walk
MAX_ADVANCE_STEPS = int(os.environ.get("SUBTRACKER_MAX_ADVANCE_STEPS", "2000"))

DEFAULT_MAIN_CURRENCY = os.environ.get("SUBTRACKER_MAIN_CURRENCY", "USD")
