"""Shared fixtures for APK list tests."""

import logging

import pytest

from apk_list.models import Product


def make_product(
    name: str = "Test",
    category: str | None = "Öl",
    sub_category: str | None = None,
    assortment: str | None = "FS",
    alcohol_percentage: float = 5.0,
    volume: float = 500.0,
    price: float = 20.0,
    recycle_fee: float = 0.0,
    out_of_stock: bool = False,
    number: str | None = None,
) -> Product:
    """Build a Product without going through the API aliases."""
    return Product(
        product_name_bold=name,
        product_number=number,
        category=category,
        sub_category=sub_category,
        assortment=assortment,
        alcohol_percentage=alcohol_percentage,
        volume=volume,
        price=price,
        recycle_fee=recycle_fee,
        is_completely_out_of_stock=out_of_stock,
    )


def product_with_score(name: str, score: float, category: str = "Öl", **kwargs) -> Product:
    """Product whose value score is exactly ``score`` (volume 100, price 10)."""
    return make_product(
        name=name,
        category=category,
        alcohol_percentage=score / 10.0,
        volume=100.0,
        price=10.0,
        recycle_fee=0.0,
        **kwargs,
    )


@pytest.fixture
def product_factory():
    return make_product


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
