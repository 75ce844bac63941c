# LLM module
from outfit_service.llm.gemini_client import GeminiClient
from outfit_service.llm.suggestion_source import (
    SuggestionSource,
    SuggestionResult,
    build_prompt,
    parse_suggestions,
    mock_suggestions,
)
