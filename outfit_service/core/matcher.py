"""
Suggestion Matcher (v1.0.0)
Turns abstract suggestions into concrete wardrobe items.
"""
import random
import logging
from typing import Any, Iterable, List, Optional

from outfit_service.core.labels import ReferenceData, label_for_color
from outfit_service.core.models import ClothingItem, Suggestion

logger = logging.getLogger(__name__)


def _contains(haystacks: Iterable[Optional[str]], needle: str) -> bool:
    needle = needle.lower()
    return any(h and needle in h.lower() for h in haystacks)


def _coerce_suggestion(raw: Any) -> Optional[Suggestion]:
    if isinstance(raw, Suggestion):
        return raw
    try:
        return Suggestion.from_dict(raw)
    except ValueError as e:
        logger.warning(f"Skipping malformed suggestion {raw!r}: {e}")
        return None


def candidates_for(
    suggestion: Suggestion,
    candidates: List[ClothingItem],
    reference: ReferenceData
) -> List[ClothingItem]:
    """All candidates satisfying a suggestion's constraints."""
    matching = [item for item in candidates if item.type == suggestion.type]

    if suggestion.category:
        matching = [
            item for item in matching
            if _contains(
                [item.category_id, reference.label_for_category(item.category_id)],
                suggestion.category
            )
        ]

    if suggestion.subcategory:
        matching = [
            item for item in matching
            if _contains(
                [item.subcategory_id, reference.label_for_subcategory(item.subcategory_id)],
                suggestion.subcategory
            )
        ]

    if suggestion.color:
        matching = [
            item for item in matching
            if _contains([label_for_color(item.color)], suggestion.color)
        ]

    return matching


def find_matches(
    suggestions: Iterable[Any],
    candidates: List[ClothingItem],
    reference: ReferenceData,
    rng: Optional[random.Random] = None
) -> List[ClothingItem]:
    """
    Pick one wardrobe item per suggestion.

    Suggestions without any matching candidate contribute nothing, and
    malformed entries are skipped. Among several candidates the pick is
    uniformly random so repeated generations vary.

    Args:
        suggestions: Suggestion objects (or their dict form)
        candidates: Wardrobe items to choose from
        reference: Category/subcategory labels
        rng: Random source (injectable for deterministic tests)

    Returns:
        Matched items, in suggestion order
    """
    rng = rng or random.Random()
    matched: List[ClothingItem] = []

    for raw in suggestions or []:
        suggestion = _coerce_suggestion(raw)
        if suggestion is None:
            continue

        matching = candidates_for(suggestion, candidates, reference)
        if not matching:
            logger.debug(f"No candidate for suggestion {suggestion.to_dict()}")
            continue

        matched.append(rng.choice(matching))

    return matched
