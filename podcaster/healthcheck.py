"""Provider health checks: ping each backend before generating."""

import asyncio
import logging

from podcaster.models import ProviderConfig
from podcaster.providers.gateway import ModelGateway

logger = logging.getLogger(__name__)

_PING_PROMPT = "Reply with the word OK only."
_PING_PERSONA = "a terse health check"
_TIMEOUT_SEC = 15.0


async def _check_one(gateway: ModelGateway, provider: ProviderConfig) -> tuple[str, bool, str]:
    """Ping a single provider. Returns (id, ok, error_message).

    Talks to the backend directly so failures are reported instead of being
    masked by the gateway's fallback text.
    """
    try:
        backend = gateway.backend_for(provider)
        await asyncio.wait_for(
            backend.complete(_PING_PROMPT, _PING_PERSONA),
            timeout=_TIMEOUT_SEC,
        )
        return provider.id, True, ""
    except Exception as exc:
        logger.debug("Health check failed for %s: %s", provider.id, exc)
        return provider.id, False, str(exc)


async def run_health_checks(
    gateway: ModelGateway,
    providers: list[ProviderConfig],
) -> dict[str, tuple[bool, str]]:
    """Ping all providers in parallel.

    Returns:
        Dict mapping provider id -> (ok, error_message).
        error_message is "" when ok is True.
    """
    results = await asyncio.gather(*(_check_one(gateway, p) for p in providers))
    return {provider_id: (ok, err) for provider_id, ok, err in results}
