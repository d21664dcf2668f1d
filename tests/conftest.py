from __future__ import annotations

import os
import time
from datetime import datetime
from pathlib import Path

import pytest

from juice_cashier.ledger import SalesLedger
from juice_cashier.models import AddOn, CupType, Flavour
from juice_cashier.pricing import make_drink
from juice_cashier.storage import BlobStore


def at(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> datetime:
    """Local wall-clock instant, made aware."""
    return datetime(year, month, day, hour, minute).astimezone()


@pytest.fixture
def dst_zone():
    """Central European rules: clocks go forward on the last Sunday of March."""
    saved = os.environ.get("TZ")
    os.environ["TZ"] = "CET-1CEST,M3.5.0,M10.5.0/3"
    time.tzset()
    try:
        yield
    finally:
        if saved is None:
            os.environ.pop("TZ", None)
        else:
            os.environ["TZ"] = saved
        time.tzset()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def ledger(data_dir: Path) -> SalesLedger:
    return SalesLedger(data_dir)


@pytest.fixture
def blobs(data_dir: Path) -> BlobStore:
    store = BlobStore(data_dir / "cashier.db")
    store.bootstrap_schema()
    return store


@pytest.fixture
def mango_cup():
    return make_drink(CupType.CUP, [Flavour.MANGO])


@pytest.fixture
def mango_pineapple_boba():
    return make_drink(CupType.CUP, [Flavour.MANGO, Flavour.PINEAPPLE], [AddOn.BOBA])


@pytest.fixture
def watermelon_shell():
    return make_drink(CupType.WSHELL, [Flavour.WATERMELON])
