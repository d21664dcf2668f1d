"""Runtime configuration defaults for persistence, logging and printing."""

from __future__ import annotations

import os
from pathlib import Path

DATA_DIR = Path(os.environ.get("JUICE_CASHIER_DATA_DIR", "data"))
WEEKS_FILENAME = "festival_weeks.json"
SALES_FILENAME = "sales.json"
BLOB_DB_FILENAME = "cashier.db"
PRESETS_BLOB_KEY = "presets.v1"

LOG_PATH = Path(os.environ.get("JUICE_CASHIER_LOG_PATH", "/tmp/juice-cashier-debug.log"))
LOG_LEVEL = os.environ.get("JUICE_CASHIER_LOG_LEVEL", "INFO").upper()

PRINT_RECEIPTS = os.environ.get("JUICE_CASHIER_PRINT_RECEIPTS", "0").strip().lower() in {"1", "true", "yes"}

# USB thermal receipt printer (ESC/POS).
PRINTER_USB_VENDOR_ID = 0x28E9
PRINTER_USB_PRODUCT_ID = 0x0289
PRINTER_WIDTH_PX = 384
PRINTER_FONT_SIZE = 32
PRINTER_FONT_PATH = "/System/Library/Fonts/SFNS.ttf"
PRINTER_LEFT_INDENT_PX = 16
