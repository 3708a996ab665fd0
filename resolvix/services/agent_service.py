"""Client for the remote log-forwarding agent's control endpoint."""
import logging
from typing import Optional

import httpx

from resolvix.core.config import settings
from resolvix.core.errors import BackendError

logger = logging.getLogger(__name__)


def control_url(node_ip: str) -> str:
    return f"http://{node_ip}:{settings.AGENT_CONTROL_PORT}{settings.AGENT_CONTROL_PATH}"


def start_live_logs(
    node_ip: str,
    log_file: Optional[str] = None,
    *,
    client: Optional[httpx.Client] = None,
) -> dict:
    """Ask the agent on ``node_ip`` to start forwarding ``log_file``.

    Returns the agent's JSON reply unchanged.
    """
    payload = {
        "command": "start_live_logs",
        "server_url": settings.AGENT_LOG_RECEIVER_URL,
        "node_id": node_ip,
        "log_file": log_file or settings.AGENT_DEFAULT_LOG_FILE,
    }
    url = control_url(node_ip)

    owns_client = client is None
    http = client or httpx.Client(timeout=settings.AGENT_REQUEST_TIMEOUT_SECONDS)
    try:
        response = http.post(url, json=payload)
        response.raise_for_status()
        return response.json()
    except httpx.HTTPStatusError as e:
        logger.error("Agent %s rejected start_live_logs: %s", node_ip, e)
        raise BackendError("The node agent reported an error.") from e
    except (httpx.RequestError, ValueError) as e:
        logger.error("Failed to contact node agent %s: %s", node_ip, e)
        raise BackendError("Failed to contact node agent.") from e
    finally:
        if owns_client:
            http.close()
