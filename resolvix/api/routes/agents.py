import logging

from fastapi import APIRouter, Depends

from resolvix.api.security import require_admin
from resolvix.models.profile import Profile
from resolvix.schemas.settings_schema import StartAgentRequest
from resolvix.services.agent_service import start_live_logs

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/start")
def start_agent(request: StartAgentRequest, admin: Profile = Depends(require_admin)):
    """Tell the agent on a node to start shipping its log file here."""
    logger.info("Profile %s starting live logs on %s", admin.id, request.node_ip)
    return start_live_logs(request.node_ip, request.log_file)
