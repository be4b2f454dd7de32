"""
Brand-prefix detection — infer shared brand names from free-text product names.

A word trie is built over all product names, each node counting how many
names pass through it. A product's brand prefix is the run of leading words
whose nodes are shared by at least two names; frequency is the only signal.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Iterable

import pandas as pd

from receipt_analytics.data.normalize import is_blank

MIN_SHARED = 2


@dataclass(frozen=True)
class BrandInfo:
    original: str
    brand_prefix: str
    display_name: str

    def to_dict(self) -> dict:
        return asdict(self)


BrandMapping = dict[str, BrandInfo]


class _TrieNode:
    __slots__ = ("count", "children")

    def __init__(self) -> None:
        self.count = 0
        self.children: dict[str, _TrieNode] = {}


def _build_trie(word_lists: list[list[str]]) -> _TrieNode:
    root = _TrieNode()
    for words in word_lists:
        node = root
        for word in words:
            node = node.children.setdefault(word, _TrieNode())
            node.count += 1
    return root


def _shared_prefix(root: _TrieNode, words: list[str]) -> list[str]:
    prefix: list[str] = []
    node = root
    for word in words:
        child = node.children.get(word)
        if child is None or child.count < MIN_SHARED:
            break
        prefix.append(word)
        node = child
    return prefix


def identify_brand_prefixes(product_names: Iterable[str]) -> dict[str, BrandInfo]:
    """Map each product name to its inferred brand prefix and display name.

    Input is treated as a multiset: a name listed twice counts twice. With
    fewer than two distinct names the mapping is empty.
    """
    names = [n for n in product_names if isinstance(n, str) and n.strip()]
    if len(set(names)) <= 1:
        return {}

    word_lists = [n.split() for n in names]
    trie = _build_trie(word_lists)

    result: dict[str, BrandInfo] = {}
    for name, words in zip(names, word_lists):
        if name in result:
            continue
        prefix = _shared_prefix(trie, words)
        brand = " ".join(prefix)
        display = " ".join(words[len(prefix):]) if prefix else name
        result[name] = BrandInfo(original=name, brand_prefix=brand, display_name=display)
    return result


def brand_names(mapping: dict[str, BrandInfo]) -> list[str]:
    """Distinct non-empty brand prefixes, sorted."""
    return sorted({info.brand_prefix for info in mapping.values() if info.brand_prefix})


def products_by_brand(mapping: dict[str, BrandInfo]) -> dict[str, list[BrandInfo]]:
    """Group mapped products under their brand; unbranded products go under "Other"."""
    grouped: dict[str, list[BrandInfo]] = {}
    for product in sorted(mapping):
        info = mapping[product]
        grouped.setdefault(info.brand_prefix or "Other", []).append(info)
    return grouped


def analyze_brands(df: pd.DataFrame, field: str = "product_name") -> tuple[dict[str, BrandInfo], list[str]]:
    """Brand mapping and brand list for the distinct products of a record set."""
    if df.empty or field not in df.columns:
        return {}, []
    products = df.loc[~is_blank(df[field]), field].astype(str).unique().tolist()
    mapping = identify_brand_prefixes(sorted(products))
    return mapping, brand_names(mapping)


# ---------------------------------------------------------------------------
# Presentation fallbacks: applied by callers, not by the detector
# ---------------------------------------------------------------------------

def _words_to_drop(words: list[str]) -> int:
    return 2 if len(words) >= 5 else 1


def fallback_display_name(product: str) -> str:
    """Strip the leading word (two words for 5+ word names) from names of 3+ words."""
    words = product.split()
    if len(words) >= 3:
        return " ".join(words[_words_to_drop(words):])
    return product


def display_name_for(product: str, mapping: dict[str, BrandInfo]) -> str:
    """Label to show for a product, falling back to word stripping when unmapped."""
    if not product:
        return ""
    info = mapping.get(product)
    if info is not None and info.display_name and info.display_name != product:
        return info.display_name
    return fallback_display_name(product)


def brand_name_for(product: str, mapping: dict[str, BrandInfo]) -> str:
    """Brand of a product, falling back to its leading word(s) for 3+ word names."""
    if not product:
        return ""
    info = mapping.get(product)
    if info is not None and info.brand_prefix:
        return info.brand_prefix
    words = product.split()
    if len(words) >= 3:
        return " ".join(words[:_words_to_drop(words)])
    return ""
