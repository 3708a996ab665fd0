"""Chat completion over the configured LLM providers.

Providers are tried in ``settings.LLM_PROVIDERS`` order; the first one that
answers wins. Clients are built lazily so a missing optional provider only
matters when it is actually reached.
"""
import logging
from functools import lru_cache
from typing import Any, Callable, Dict, Sequence, Tuple

from langchain_core.messages import BaseMessage

from resolvix.core.config import settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _vertex() -> Any:
    from langchain_google_vertexai import ChatVertexAI

    return ChatVertexAI(
        model_name=settings.VERTEX_LLM_MODEL,
        project=settings.GCP_PROJECT_ID,
        location=settings.GCP_LOCATION,
        temperature=0.2,
        max_output_tokens=1024,
        timeout=float(settings.LLM_REQUEST_TIMEOUT_SECONDS),
    )


@lru_cache(maxsize=1)
def _groq() -> Any:
    from langchain_groq import ChatGroq

    if not settings.GROQ_API_KEY:
        raise RuntimeError("GROQ_API_KEY is not set")

    return ChatGroq(
        model=settings.GROQ_FALLBACK_MODEL,
        api_key=settings.GROQ_API_KEY,
        temperature=0.2,
        max_tokens=1024,
        timeout=float(settings.LLM_REQUEST_TIMEOUT_SECONDS),
    )


PROVIDERS: Dict[str, Callable[[], Any]] = {"vertex": _vertex, "groq": _groq}


def _reply_text(reply: Any) -> str:
    content = getattr(reply, "content", reply)
    # Gemini may answer with a list of content parts.
    if isinstance(content, list):
        content = "".join(p.get("text", "") if isinstance(p, dict) else str(p) for p in content)
    return str(content).strip()


def complete(messages: Sequence[BaseMessage]) -> Tuple[str, str]:
    """Send ``messages`` to the first provider that answers.

    Returns (reply_text, provider). Raises RuntimeError when none does.
    """
    last_err: Exception | None = None
    for name in settings.LLM_PROVIDERS:
        factory = PROVIDERS.get(name)
        if factory is None:
            logger.warning("Unknown LLM provider %r in LLM_PROVIDERS; skipped", name)
            continue
        try:
            text = _reply_text(factory().invoke(list(messages)))
        except Exception as e:
            last_err = e
            logger.warning("%s LLM call failed; trying next provider. error=%s", name, e)
            continue
        if text:
            return text, name
        logger.warning("%s LLM returned an empty reply; trying next provider", name)

    raise RuntimeError("No LLM provider produced a reply") from last_err
