"""Entry point for the juice cashier Textual app."""

from __future__ import annotations

from juice_cashier.app_logger import setup_logging
from juice_cashier.cashier_app import CashierApp
from juice_cashier.config import BLOB_DB_FILENAME, DATA_DIR, PRINT_RECEIPTS
from juice_cashier.ledger import SalesLedger
from juice_cashier.presets import PresetStore
from juice_cashier.printer import check_printer_dependencies, print_sale_receipt
from juice_cashier.storage import BlobStore


def main() -> None:
    """Wire the stores together and run the Textual application."""
    logger = setup_logging()
    try:
        DATA_DIR.mkdir(parents=True, exist_ok=True)
    except OSError:
        logger.warning("cannot create data dir %s; saves will fail", DATA_DIR, exc_info=True)

    ledger = SalesLedger(DATA_DIR)
    blobs = BlobStore(DATA_DIR / BLOB_DB_FILENAME)
    presets = PresetStore(blobs)

    receipt_printer = None
    if PRINT_RECEIPTS:
        ready, message = check_printer_dependencies()
        if not ready:
            logger.warning("receipt printing disabled: %s", message)
        else:
            receipt_printer = print_sale_receipt

    logger.info("starting cashier data_dir=%s printing=%s", DATA_DIR, receipt_printer is not None)
    CashierApp(ledger, presets, receipt_printer=receipt_printer).run()


if __name__ == "__main__":
    main()
