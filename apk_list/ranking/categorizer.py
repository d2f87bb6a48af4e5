"""Eligibility filtering and group classification for catalog products."""

import logging
from enum import Enum
from typing import Iterable

from apk_list.models import Product

logger = logging.getLogger(__name__)


class Group(str, Enum):
    """Page groups. The value is the display name shown on the page."""

    BEER = "Öl"
    WINE = "Vin"
    CIDER = "Cider"
    LIQUOR = "Sprit"
    OTHER = "Annat"


# Page order
GROUP_ORDER: tuple[Group, ...] = (
    Group.BEER,
    Group.WINE,
    Group.CIDER,
    Group.LIQUOR,
    Group.OTHER,
)

# Limited/temporary ranges that never appear on the page
EXCLUDED_ASSORTMENTS = frozenset({"BS", "TSLS"})

WINE_CATEGORIES = frozenset({
    "Röda viner",
    "Vita viner",
    "Mousserande viner",
    "Roséviner",
    "Aperitif & dessert",
})
BEER_CATEGORY = "Öl"
CIDER_AND_MIXED_CATEGORY = "Cider och blanddrycker"
CIDER_SUB_CATEGORY = "Cider"
LIQUOR_CATEGORY = "Sprit"

# Stand-in for a missing category or sub-category
MISSING_LABEL = "Other"


def is_eligible(product: Product) -> bool:
    """Check whether a product may appear on the page at all."""
    if product.alcohol_percentage <= 0:
        return False
    if product.assortment in EXCLUDED_ASSORTMENTS:
        return False
    return not product.is_completely_out_of_stock


def classify(product: Product) -> Group:
    """Map an eligible product to its group from category and sub-category."""
    category = product.category or MISSING_LABEL

    if category in WINE_CATEGORIES:
        return Group.WINE
    if category == BEER_CATEGORY:
        return Group.BEER
    if category == CIDER_AND_MIXED_CATEGORY:
        sub_category = product.sub_category or MISSING_LABEL
        return Group.CIDER if sub_category == CIDER_SUB_CATEGORY else Group.OTHER
    if category == LIQUOR_CATEGORY:
        return Group.LIQUOR
    return Group.OTHER


def categorize(products: Iterable[Product]) -> dict[Group, list[Product]]:
    """
    Split products into the five page groups.

    Ineligible products are dropped. Every group is present in the result,
    in page order, even when empty.

    Args:
        products: Full catalog as fetched

    Returns:
        Mapping of group to its products, in fetch order
    """
    groups: dict[Group, list[Product]] = {group: [] for group in GROUP_ORDER}
    excluded = 0

    for product in products:
        if not is_eligible(product):
            excluded += 1
            continue
        groups[classify(product)].append(product)

    logger.debug(
        "Categorized products: %s (%d excluded)",
        ", ".join(f"{group.name.lower()}={len(items)}" for group, items in groups.items()),
        excluded,
    )
    return groups
