"""
Suggestion Source (v1.0.0)
Complementary-garment suggestions from Gemini, with a rule-based mock.

The source never raises for upstream problems: missing credential,
rate limiting, cool-down, unavailable model, transport errors and
unparseable replies all resolve to the mock generator. Only malformed
caller input (no item, unknown clothing type) is a hard error.
"""
import re
import json
import random
import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from outfit_service.core.errors import (
    SuggestionError,
    RateLimitedError,
    EndpointUnavailableError,
    MalformedResponseError,
)
from outfit_service.core.labels import ReferenceData, label_for_color
from outfit_service.core.models import (
    ClothingItem,
    Suggestion,
    CLOTHING_TYPES,
    UPPER,
    BOTTOM,
    opposite_type,
)
from outfit_service.core.rate_limit import RateLimiter, credential_key
from outfit_service.llm.gemini_client import GeminiClient
from outfit_service.observability import metrics

logger = logging.getLogger(__name__)

JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")

SOURCE_GEMINI = "gemini"
SOURCE_MOCK = "mock"


@dataclass
class SuggestionResult:
    """Suggestions plus where they came from."""
    suggestions: List[Suggestion] = field(default_factory=list)
    source: str = SOURCE_MOCK
    # Why the mock was used (None when Gemini answered)
    reason: Optional[str] = None
    # True only the first time a credential is found unusable
    notify: bool = False

    @property
    def used_fallback(self) -> bool:
        return self.source == SOURCE_MOCK


# ==================== PROMPT ====================

def build_prompt(
    item: ClothingItem,
    color_label: str,
    category_label: str,
    subcategory_label: str
) -> str:
    """Natural-language request for garments that pair with `item`."""
    target = opposite_type(item.type)
    return f"""I have a {color_label} {subcategory_label} {category_label} which is an {item.type} body garment.
Please suggest 2 to 4 {target} garments that would pair well with it.
Respond in JSON format like this:
{{
  "suggestions": [
    {{
      "type": "{target}",
      "category": "category name",
      "subcategory": "optional subcategory name",
      "color": "suggested color name"
    }}
  ]
}}
Use simple color names (black, white, blue, beige, gray, ...). Return ONLY the JSON object."""


def parse_suggestions(text: str, max_suggestions: int = 3) -> List[Suggestion]:
    """
    Extract suggestions from a model reply.

    Entries missing a string type/category, or naming an unknown
    clothing type, are discarded.

    Raises:
        MalformedResponseError: If no JSON object is found or none survive
    """
    match = JSON_OBJECT_PATTERN.search(text or "")
    if not match:
        raise MalformedResponseError("No JSON object in reply")

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Invalid JSON in reply: {e}") from e

    raw = data.get("suggestions") if isinstance(data, dict) else None
    if not isinstance(raw, list):
        raise MalformedResponseError("Reply has no 'suggestions' array")

    suggestions = []
    for entry in raw:
        try:
            suggestion = Suggestion.from_dict(entry)
        except ValueError as e:
            logger.debug(f"Discarding suggestion {entry!r}: {e}")
            continue

        suggestion.type = suggestion.type.strip().lower()
        if suggestion.type not in CLOTHING_TYPES:
            logger.debug(f"Discarding suggestion with type {suggestion.type!r}")
            continue

        suggestions.append(suggestion)

    if not suggestions:
        raise MalformedResponseError("Reply contained no valid suggestions")

    return suggestions[:max_suggestions]


# ==================== MOCK GENERATOR ====================

def mock_suggestions(
    clothing_type: str,
    color_label: str,
    category_label: str,
    rng: Optional[random.Random] = None
) -> List[Suggestion]:
    """
    Rule-based suggestion for a seed item. Always exactly one entry.

    Upper seeds get a bottom by color; bottom seeds get an upper by category.
    """
    rng = rng or random.Random()
    color = (color_label or "").lower()
    category = (category_label or "").lower()

    if clothing_type == UPPER:
        if color in ("black", "white"):
            suggestion = Suggestion(
                type=BOTTOM,
                category=rng.choice(["Jeans", "Pants"]),
                color=rng.choice(["blue", "black", "beige", "gray"]),
            )
        elif color == "blue":
            suggestion = Suggestion(type=BOTTOM, category="Jeans", color="blue")
        else:
            suggestion = Suggestion(type=BOTTOM, category="Pants", color="black")
    else:
        if "jeans" in category:
            suggestion = Suggestion(type=UPPER, category="T-Shirt", color="white")
        elif "pants" in category:
            top, top_color = rng.choice([("Sweater", "black"), ("Shirt", "white")])
            suggestion = Suggestion(type=UPPER, category=top, color=top_color)
        else:
            suggestion = Suggestion(
                type=UPPER,
                category="T-Shirt",
                color="white" if color == "black" else "black",
            )

    return [suggestion]


# ==================== SOURCE ====================

class SuggestionSource:
    """
    Usage:
        source = SuggestionSource(client=GeminiClient(), rate_limiter=RateLimiter())
        result = await source.get_suggestions(item, reference, api_key)
    """

    def __init__(
        self,
        client: Optional[GeminiClient] = None,
        rate_limiter: Optional[RateLimiter] = None,
        rng: Optional[random.Random] = None,
        llm_enabled: bool = True,
        max_suggestions: int = 3,
        mock_delay_ms: int = 0
    ):
        self.client = client or GeminiClient()
        self.rate_limiter = rate_limiter or RateLimiter()
        self.rng = rng or random.Random()
        self.llm_enabled = llm_enabled
        self.max_suggestions = max_suggestions
        self.mock_delay_ms = mock_delay_ms

    async def get_suggestions(
        self,
        item: ClothingItem,
        reference: ReferenceData,
        api_key: Optional[str] = None
    ) -> SuggestionResult:
        """
        Suggestions for a seed item.

        Raises:
            ValueError: If item is missing or has an unknown clothing type
        """
        if item is None or item.type not in CLOTHING_TYPES:
            raise ValueError(f"Cannot suggest for item {item!r}")

        color_label = label_for_color(item.color)
        category_label = reference.label_for_category(item.category_id)
        subcategory_label = reference.label_for_subcategory(item.subcategory_id)

        if not self.llm_enabled:
            return await self._mock(item, color_label, category_label, "llm_disabled")

        if not api_key:
            return await self._mock(item, color_label, category_label, "no_credential")

        key = credential_key(api_key)

        if self.rate_limiter.is_unavailable(key):
            return await self._mock(item, color_label, category_label, "model_unavailable")

        if self.rate_limiter.in_cooldown(key):
            return await self._mock(item, color_label, category_label, "cooldown")

        try:
            self.rate_limiter.acquire(key)
        except RateLimitedError:
            metrics.increment("rate_limited")
            return await self._mock(item, color_label, category_label, "rate_limited", notify=True)

        prompt = build_prompt(item, color_label, category_label, subcategory_label)

        try:
            metrics.increment("gemini_calls")
            logger.info(f"Calling Gemini for item {item.item_id} ({item.type})...")
            text = await self.client.generate_text(api_key, prompt)
            suggestions = parse_suggestions(text, self.max_suggestions)
        except RateLimitedError as e:
            metrics.increment("gemini_failures")
            self.rate_limiter.start_cooldown(key, e.retry_after)
            return await self._mock(item, color_label, category_label, e.reason, notify=True)
        except EndpointUnavailableError as e:
            metrics.increment("gemini_failures")
            newly_marked = self.rate_limiter.mark_unavailable(key)
            logger.warning(f"Gemini unavailable: {e}")
            return await self._mock(item, color_label, category_label, e.reason, notify=newly_marked)
        except SuggestionError as e:
            metrics.increment("gemini_failures")
            logger.warning(f"Gemini suggestion failed ({e.reason}): {e}")
            return await self._mock(item, color_label, category_label, e.reason)

        logger.info(f"✓ Gemini returned {len(suggestions)} suggestions for {item.item_id}")
        return SuggestionResult(suggestions=suggestions, source=SOURCE_GEMINI)

    async def _mock(
        self,
        item: ClothingItem,
        color_label: str,
        category_label: str,
        reason: str,
        notify: bool = False
    ) -> SuggestionResult:
        if self.mock_delay_ms > 0:
            await asyncio.sleep(self.mock_delay_ms / 1000)

        metrics.increment("mock_fallbacks")
        logger.info(f"Using mock suggestions for {item.item_id} (reason: {reason})")
        return SuggestionResult(
            suggestions=mock_suggestions(item.type, color_label, category_label, self.rng),
            source=SOURCE_MOCK,
            reason=reason,
            notify=notify,
        )

    def reset_credential(self, api_key: Optional[str]) -> None:
        """Forget the unavailable flag after the credential changes."""
        self.rate_limiter.clear_unavailable(credential_key(api_key))

    def get_status(self, api_key: Optional[str] = None) -> dict:
        return {
            "llm_enabled": self.llm_enabled,
            "client": self.client.get_status(),
            "rate_limit": self.rate_limiter.get_status(credential_key(api_key)),
        }
