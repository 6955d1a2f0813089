"""Tests for PurchaseService against a fake commerce gateway."""

from __future__ import annotations

import json

import pytest

from services.feature_flags import FeatureFlags
from services.purchase_service import (
    Product,
    PurchaseOutcome,
    PurchaseResult,
    PurchaseService,
    load_product_ids,
)
from services.store_service import SettingsStore
from utils.constants import IAP_PRODUCT_IDS_FILE, LEAKS_PACKAGE_PRODUCT_ID, REMOVE_ADS_PRODUCT_ID
from utils.errors import CommerceError, CommerceErrorKind
from utils.result import Result


class FakeGateway:
    """Records calls and replays configured outcomes synchronously."""

    def __init__(self, products=None, list_error=None, outcomes=None, can_pay=True):
        self.products = products or []
        self.list_error = list_error
        self.outcomes = outcomes or []
        self.can_pay = can_pay
        self.listed: list[list[str]] = []
        self.purchased: list[str] = []
        self.observing_calls: list[str] = []
        self.restored = 0

    def list_products(self, product_ids, handler):
        self.listed.append(list(product_ids))
        if self.list_error is not None:
            handler(Result.failure(self.list_error))
        else:
            handler(Result.success(list(self.products)))

    def purchase(self, product_id, handler):
        self.purchased.append(product_id)
        for outcome in self.outcomes:
            handler(PurchaseResult(product_id=product_id, outcome=outcome[0], reason=outcome[1]))

    def can_make_payments(self):
        return self.can_pay

    def restore_purchases(self):
        self.restored += 1

    def start_observing(self):
        self.observing_calls.append("start")

    def stop_observing(self):
        self.observing_calls.append("stop")


@pytest.fixture
def flags(tmp_path):
    return FeatureFlags(SettingsStore(tmp_path / "settings.json"))


@pytest.fixture
def product_ids_file(tmp_path):
    path = tmp_path / "iap_product_ids.json"
    path.write_text(json.dumps([REMOVE_ADS_PRODUCT_ID, LEAKS_PACKAGE_PRODUCT_ID]), encoding="utf-8")
    return path


def make_service(gateway, flags, product_ids_path):
    return PurchaseService(gateway, flags=flags, product_ids_path=product_ids_path)


def test_bundled_product_ids_are_readable():
    assert load_product_ids(IAP_PRODUCT_IDS_FILE) == [
        REMOVE_ADS_PRODUCT_ID,
        LEAKS_PACKAGE_PRODUCT_ID,
    ]


def test_load_product_ids_missing_file(tmp_path):
    assert load_product_ids(tmp_path / "missing.json") is None


@pytest.mark.parametrize("content", ["{not json", '{"ids": []}'])
def test_load_product_ids_malformed(tmp_path, content):
    path = tmp_path / "ids.json"
    path.write_text(content, encoding="utf-8")

    assert load_product_ids(path) is None


def test_load_products_success(flags, product_ids_file):
    products = [Product(REMOVE_ADS_PRODUCT_ID, "Remove Ads", "$0.99")]
    gateway = FakeGateway(products=products)
    service = make_service(gateway, flags, product_ids_file)
    received = []

    service.load_products(received.append)

    assert gateway.listed == [[REMOVE_ADS_PRODUCT_ID, LEAKS_PACKAGE_PRODUCT_ID]]
    assert received[0].is_success
    assert received[0].value == products
    assert service.products == products


def test_load_products_without_identifiers_skips_gateway(flags, tmp_path):
    gateway = FakeGateway()
    service = make_service(gateway, flags, tmp_path / "missing.json")
    received = []

    service.load_products(received.append)

    assert gateway.listed == []
    assert received[0].is_error
    assert received[0].error.kind is CommerceErrorKind.NO_PRODUCT_IDENTIFIERS


@pytest.mark.parametrize(
    "kind", [CommerceErrorKind.NO_PRODUCTS_FOUND, CommerceErrorKind.REQUEST_FAILED]
)
def test_load_products_forwards_gateway_errors(flags, product_ids_file, kind):
    gateway = FakeGateway(list_error=CommerceError(kind))
    service = make_service(gateway, flags, product_ids_file)
    received = []

    service.load_products(received.append)

    assert received[0].error.kind is kind
    assert service.products == []


def test_purchase_remove_ads_sets_flag_once_for_duplicate_confirmation(
    flags, product_ids_file, monkeypatch
):
    gateway = FakeGateway(
        outcomes=[(PurchaseOutcome.PURCHASED, None), (PurchaseOutcome.PURCHASED, None)]
    )
    service = make_service(gateway, flags, product_ids_file)
    writes = []
    original = flags.settings.set_bool

    def counting_set_bool(key, value):
        writes.append(key)
        original(key, value)

    monkeypatch.setattr(flags.settings, "set_bool", counting_set_bool)
    results = []

    assert service.buy(REMOVE_ADS_PRODUCT_ID, results.append) is True

    assert flags.ads_removed is True
    assert flags.leaks_unlocked is False
    assert writes == ["adsRemoved"]
    assert [r.value for r in results] == [True, True]


def test_purchase_leaks_package_sets_leaks_flag(flags, product_ids_file):
    gateway = FakeGateway(outcomes=[(PurchaseOutcome.PURCHASED, None)])
    service = make_service(gateway, flags, product_ids_file)

    service.buy(LEAKS_PACKAGE_PRODUCT_ID)

    assert flags.leaks_unlocked is True
    assert flags.ads_removed is False


def test_purchase_unknown_product_changes_nothing(flags, product_ids_file):
    gateway = FakeGateway(outcomes=[(PurchaseOutcome.PURCHASED, None)])
    service = make_service(gateway, flags, product_ids_file)
    results = []

    service.buy("com.example.stickers", results.append)

    assert results[0].is_success
    assert flags.ads_removed is False
    assert flags.leaks_unlocked is False


def test_cancelled_purchase_reports_error_without_flag(flags, product_ids_file):
    gateway = FakeGateway(outcomes=[(PurchaseOutcome.CANCELLED, None)])
    service = make_service(gateway, flags, product_ids_file)
    results = []

    service.buy(REMOVE_ADS_PRODUCT_ID, results.append)

    assert results[0].error.kind is CommerceErrorKind.PURCHASE_CANCELLED
    assert flags.ads_removed is False


def test_failed_purchase_carries_reason(flags, product_ids_file):
    gateway = FakeGateway(outcomes=[(PurchaseOutcome.FAILED, "card declined")])
    service = make_service(gateway, flags, product_ids_file)
    results = []

    service.buy(REMOVE_ADS_PRODUCT_ID, results.append)

    error = results[0].error
    assert error.kind is CommerceErrorKind.PURCHASE_FAILED
    assert error.reason == "card declined"
    assert "card declined" in str(error)
    assert flags.ads_removed is False


def test_buy_refused_when_payments_disabled(flags, product_ids_file):
    gateway = FakeGateway(can_pay=False, outcomes=[(PurchaseOutcome.PURCHASED, None)])
    service = make_service(gateway, flags, product_ids_file)

    assert service.buy(REMOVE_ADS_PRODUCT_ID) is False
    assert gateway.purchased == []
    assert flags.ads_removed is False


def test_lifecycle_starts_and_stops_observing_once(flags, product_ids_file):
    gateway = FakeGateway()
    service = make_service(gateway, flags, product_ids_file)

    service.start()
    service.start()
    assert service.is_observing
    service.stop()
    service.stop()

    assert gateway.observing_calls == ["start", "stop"]
    assert not service.is_observing


def test_restore_purchases_delegates(flags, product_ids_file):
    gateway = FakeGateway()
    service = make_service(gateway, flags, product_ids_file)

    service.restore_purchases()

    assert gateway.restored == 1
