# services/gemini.py
import functools
import logging
import random
import time

import httpx
from google import genai
from google.genai import types, errors as gerrors

from config import settings
from core.errors import GeneratorQuotaExceeded, GeneratorUnavailable

_LOG = logging.getLogger(__name__)


# ───────────── Client (lazy, so the app boots without a key) ─────────────
@functools.lru_cache(maxsize=1)
def _client() -> genai.Client:
    key = settings.gemini_api_key
    if not key or key == "your_gemini_api_key_here":
        raise GeneratorUnavailable("GEMINI_API_KEY not set in environment")
    return genai.Client(api_key=key)


def _is_rate_limit(e: gerrors.APIError) -> bool:
    return getattr(e, "code", None) == 429 or getattr(e, "status", None) == "RESOURCE_EXHAUSTED"


# ───────────── Generation (sync + retry) ─────────────
def generate(
    prompt: str,
    temperature: float | None = None,
    max_output_tokens: int | None = None,
) -> str:
    """Run a completion and return the model's text, retrying on rate limits."""
    client = _client()
    config = types.GenerateContentConfig(
        temperature=settings.gemini_temperature if temperature is None else temperature,
        max_output_tokens=max_output_tokens or settings.gemini_max_output_tokens,
    )
    for attempt in range(settings.gemini_max_retries):
        try:
            resp = client.models.generate_content(
                model=settings.gemini_model,
                contents=[prompt],
                config=config,
            )
            # take the first candidate’s text
            return resp.candidates[0].content.parts[0].text or ""
        except gerrors.ClientError as e:
            if not _is_rate_limit(e):
                raise GeneratorUnavailable(f"Gemini rejected the request: {e}") from e
            backoff = (2 ** attempt) + random.random()
            _LOG.warning("Gemini 429, retrying in %.1fs…", backoff)
            time.sleep(backoff)
        except gerrors.APIError as e:
            _LOG.error("Gemini generation failed: %s", e)
            raise GeneratorUnavailable(f"Gemini unavailable: {e}") from e
        except httpx.TransportError as e:
            _LOG.error("Gemini unreachable: %s", e)
            raise GeneratorUnavailable(f"Gemini unreachable: {e}") from e
        except (IndexError, AttributeError) as e:
            raise GeneratorUnavailable("Gemini returned no candidates") from e
    raise GeneratorQuotaExceeded("Gemini quota exhausted, retries used up")
