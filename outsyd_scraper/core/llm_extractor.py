"""LLM event extraction: page markdown -> list of ScrapeCandidate.

The model is forced to call an ``extract_events`` function whose schema
mirrors ScrapeCandidate. Its arguments are still untrusted JSON: they are
decoded item by item and anything that does not fit is counted and dropped.
"""

import json
from typing import Any, Protocol

from groq import Groq
from openai import OpenAI
from pydantic import ValidationError

from outsyd_scraper.config.settings import Settings, get_settings
from outsyd_scraper.core.event_model import EventCategory, ExtractionResult, ScrapeCandidate
from outsyd_scraper.core.exceptions import JSONParseError, LLMError
from outsyd_scraper.logging import get_logger

logger = get_logger(__name__)


class StructuredExtractor(Protocol):
    """Anything that can turn page text into event candidates."""

    def extract(self, content: str, source_country: str, source_name: str) -> ExtractionResult:
        """Extract candidates, raising ExtractionError/ParseError on failure."""
        ...


EXTRACTION_SYSTEM_PROMPT = (
    "You are an event data extractor. Extract event information from the provided "
    "content and return a JSON array of events. Each event should have: title, "
    'date (in "Month DD, YYYY" format), time (in "HH:MM - HH:MM" format or "TBD"), '
    "venue, description (max 200 chars), category (one of: {categories}), city, "
    "ticket_url (if available), ticket_price (number or null), image_url (if available). "
    "Only include real upcoming events, not past events or promotional content. "
    "Return ONLY valid JSON array, no other text."
)

EXTRACTION_USER_PROMPT = "Extract events from this content from {country} ({source_name}):\n\n{content}"

EXTRACT_EVENTS_TOOL: dict[str, Any] = {
    "type": "function",
    "function": {
        "name": "extract_events",
        "description": "Extract events from website content",
        "parameters": {
            "type": "object",
            "properties": {
                "events": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "title": {"type": "string"},
                            "date": {"type": "string"},
                            "time": {"type": "string"},
                            "venue": {"type": "string"},
                            "description": {"type": "string"},
                            "category": {
                                "type": "string",
                                "enum": [c.value for c in EventCategory],
                            },
                            "city": {"type": "string"},
                            "ticket_url": {"type": "string"},
                            "ticket_price": {"type": "number"},
                            "image_url": {"type": "string"},
                        },
                        "required": ["title", "date", "venue", "category", "city"],
                    },
                }
            },
            "required": ["events"],
        },
    },
}

EXTRACT_EVENTS_TOOL_CHOICE = {"type": "function", "function": {"name": "extract_events"}}


def _strip_code_fences(content: str) -> str:
    """Remove a ```json ... ``` wrapper if the model added one."""
    content = content.strip()
    if content.startswith("```"):
        content = content.split("```")[1]
        if content.startswith("json"):
            content = content[4:]
    return content.strip()


def parse_extraction_payload(raw: str | None) -> ExtractionResult:
    """Decode extractor output into candidates.

    Accepts ``{"events": [...]}`` or a bare ``[...]``. Items that are not
    objects or fail ScrapeCandidate validation are counted as malformed.

    Raises:
        JSONParseError: Payload missing, not JSON, or no event list in it
    """
    if not raw or not raw.strip():
        raise JSONParseError("Empty extractor payload")

    text = _strip_code_fences(raw)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise JSONParseError(f"Extractor payload is not valid JSON: {e}", raw_data=text) from e

    if isinstance(data, dict):
        items = data.get("events")
    else:
        items = data

    if not isinstance(items, list):
        raise JSONParseError("Extractor payload has no event list", raw_data=text)

    result = ExtractionResult()
    for item in items:
        if not isinstance(item, dict):
            result.malformed += 1
            continue
        try:
            result.candidates.append(ScrapeCandidate.model_validate(item))
        except ValidationError as e:
            result.malformed += 1
            logger.debug(
                "candidate_malformed",
                errors=e.error_count(),
                item=str(item)[:100],
            )

    return result


class LLMExtractor:
    """Tool-call constrained event extractor (AI gateway or Groq)."""

    def __init__(self, settings: Settings | None = None, client: Groq | OpenAI | None = None) -> None:
        self.settings = settings or get_settings()
        self._client = client

    @property
    def provider(self) -> str:
        """Get the configured LLM provider."""
        return self.settings.llm_provider

    @property
    def model(self) -> str:
        return self.settings.llm_model

    @property
    def client(self) -> Groq | OpenAI:
        """Lazy initialization of LLM client (AI gateway or Groq)."""
        if self._client is None:
            if self.provider == "groq":
                if not self.settings.groq_api_key:
                    raise LLMError("GROQ_API_KEY not configured", provider="groq")
                self._client = Groq(api_key=self.settings.groq_api_key)
            else:
                if not self.settings.ai_gateway_api_key:
                    raise LLMError("AI_GATEWAY_API_KEY not configured", provider="gateway")
                # The gateway speaks the OpenAI chat completions API
                self._client = OpenAI(
                    base_url=self.settings.ai_gateway_url,
                    api_key=self.settings.ai_gateway_api_key,
                    timeout=120.0,
                    max_retries=0,
                )
            logger.info("llm_client_initialized", provider=self.provider, model=self.model)
        return self._client

    def build_messages(self, content: str, source_country: str, source_name: str) -> list[dict[str, str]]:
        """Chat messages for one page."""
        return [
            {
                "role": "system",
                "content": EXTRACTION_SYSTEM_PROMPT.format(
                    categories=", ".join(c.value for c in EventCategory),
                ),
            },
            {
                "role": "user",
                "content": EXTRACTION_USER_PROMPT.format(
                    country=source_country,
                    source_name=source_name,
                    content=content,
                ),
            },
        ]

    def extract(self, content: str, source_country: str, source_name: str) -> ExtractionResult:
        """Extract event candidates from page content.

        Args:
            content: Page markdown (already truncated by the caller)
            source_country: Country of the source, given to the model as context
            source_name: Source name, for the prompt and logs

        Returns:
            ExtractionResult with decoded candidates and malformed count

        Raises:
            LLMError: The API call failed
            JSONParseError: The model's answer could not be decoded
        """
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=self.build_messages(content, source_country, source_name),
                tools=[EXTRACT_EVENTS_TOOL],
                tool_choice=EXTRACT_EVENTS_TOOL_CHOICE,
                temperature=0.1,
            )
        except LLMError:
            raise
        except Exception as e:
            raise LLMError(
                f"Extraction request failed: {e}",
                model=self.model,
                provider=self.provider,
                source=source_name,
            ) from e

        try:
            message = response.choices[0].message
        except (AttributeError, IndexError, TypeError) as e:
            raise JSONParseError("Extractor response has no message", source=source_name) from e

        tool_calls = getattr(message, "tool_calls", None) or []
        if tool_calls:
            raw = tool_calls[0].function.arguments
        else:
            # Some models ignore tool_choice and answer in plain content
            raw = getattr(message, "content", None)
            if raw:
                logger.warning("llm_no_tool_call", source_name=source_name)

        try:
            result = parse_extraction_payload(raw)
        except JSONParseError as e:
            e.source = source_name
            raise

        logger.info(
            "llm_extracted",
            source_name=source_name,
            candidates=len(result.candidates),
            malformed=result.malformed,
        )
        return result


# Singleton
_extractor: LLMExtractor | None = None


def get_llm_extractor(settings: Settings | None = None) -> LLMExtractor:
    """Get singleton LLM extractor instance."""
    global _extractor
    if _extractor is None:
        _extractor = LLMExtractor(settings=settings)
    return _extractor
