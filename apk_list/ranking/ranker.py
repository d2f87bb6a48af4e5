"""Order products by value score."""

from typing import Iterable, Mapping

from apk_list.models import Product, value_score
from apk_list.ranking.categorizer import Group


def rank(products: Iterable[Product]) -> list[Product]:
    """Sort by descending value score. Ties keep their input order."""
    return sorted(products, key=value_score, reverse=True)


def rank_groups(groups: Mapping[Group, Iterable[Product]]) -> dict[Group, list[Product]]:
    """Rank every group, preserving the group order of the input mapping."""
    return {group: rank(products) for group, products in groups.items()}
