"""
Media relevance matching over a module's media catalog.

All functions are pure and order-stable: results follow catalog order within
each predicate, predicates are unioned in a fixed order, and an item never
appears twice.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from salesbot.schemas.module import MediaItem, Product

# Vietnamese color word -> synonyms (Vietnamese and English). Used in both directions.
COLOR_SYNONYMS: dict[str, tuple[str, ...]] = {
    "xanh": ("blue", "green", "xanh", "navy", "cyan"),
    "đỏ": ("red", "đỏ", "crimson", "scarlet"),
    "vàng": ("yellow", "vàng", "gold", "amber"),
    "trắng": ("white", "trắng"),
    "đen": ("black", "đen"),
    "hồng": ("pink", "hồng", "rose"),
    "tím": ("purple", "tím", "violet"),
    "cam": ("orange", "cam"),
    "nâu": ("brown", "nâu"),
    "xám": ("gray", "grey", "xám"),
}

COLOR_KEYWORDS = tuple(COLOR_SYNONYMS)


def _unique(items: Iterable[MediaItem]) -> list[MediaItem]:
    seen: set[str] = set()
    result = []
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        result.append(item)
    return result


def _mutual_substring(value: str, query: str) -> bool:
    value = value.lower()
    return bool(value) and (query in value or value in query)


def expand_colors(text: str) -> list[str]:
    """Every synonym of every color family mentioned in text, either by its Vietnamese key or a synonym."""
    lowered = text.lower()
    expanded: list[str] = []
    for key, synonyms in COLOR_SYNONYMS.items():
        if key in lowered or any(s in lowered for s in synonyms):
            expanded.extend(s for s in synonyms if s not in expanded)
    return expanded


def parse_colors(text: str) -> list[str]:
    """Synonyms for the Vietnamese color words found in text, e.g. "áo xanh" -> blue, green, xanh..."""
    lowered = text.lower()
    found: list[str] = []
    for key, synonyms in COLOR_SYNONYMS.items():
        if key in lowered:
            found.extend(s for s in synonyms if s not in found)
    return found


def _matches_colors(item: MediaItem, synonyms: Sequence[str]) -> bool:
    return any(
        synonym in color.lower()
        for color in item.metadata.colors
        for synonym in synonyms
    )


def find_by_color(items: Sequence[MediaItem], text: str) -> list[MediaItem]:
    synonyms = expand_colors(text)
    if not synonyms:
        return []
    return _unique(item for item in items if _matches_colors(item, synonyms))


def find_by_query(items: Sequence[MediaItem], text: str) -> list[MediaItem]:
    query = text.lower().strip()
    if not query:
        return []
    synonyms = expand_colors(query)

    color_matches = [
        item
        for item in items
        if any(_mutual_substring(c, query) for c in item.metadata.colors)
        or (synonyms and _matches_colors(item, synonyms))
    ]
    # Linking by product id needs the catalog; find_for_product covers that case.
    product_matches: list[MediaItem] = []
    feature_matches = [
        item
        for item in items
        if any(
            _mutual_substring(value, query)
            for value in (
                item.metadata.features + item.metadata.tags + item.metadata.ai_tags
            )
        )
    ]
    description_matches = [
        item
        for item in items
        if item.metadata.description and query in item.metadata.description.lower()
    ]
    return _unique(
        color_matches + product_matches + feature_matches + description_matches
    )


def find_for_product(items: Sequence[MediaItem], product: Product) -> list[MediaItem]:
    name = product.name.lower()
    result = []
    for item in items:
        meta = item.metadata
        if product.id in meta.product_ids:
            result.append(item)
        elif name and meta.description and name in meta.description.lower():
            result.append(item)
        elif name and any(name in tag.lower() for tag in meta.tags + meta.ai_tags):
            result.append(item)
    return result


def select_for_message(
    items: Sequence[MediaItem], text: str, limit: int
) -> list[MediaItem]:
    """Media to attach to a reply: color matches when a color word is present, else query matches."""
    if limit <= 0 or not items:
        return []
    lowered = text.lower()
    color = next((c for c in COLOR_KEYWORDS if c in lowered), None)
    if color is not None:
        by_color = find_by_color(items, color)
        if by_color:
            return by_color[:limit]
    return find_by_query(items, text)[:limit]
