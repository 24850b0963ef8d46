import logging
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .domain.enums import Requester, Role
from .utils import decode_access_token

logger = logging.getLogger(__name__)

# Missing credentials are reported by us, not by HTTPBearer's 403
oauth2_scheme = HTTPBearer(auto_error=False)


def _requester_from(credentials: HTTPAuthorizationCredentials) -> Requester:
    if not credentials or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Not Authorized. Login Again.")
    payload = decode_access_token(credentials.credentials)
    if not payload:
        logger.warning("JWT token decode failed - invalid or expired token")
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    subject = payload.get("sub")
    if not subject:
        raise HTTPException(status_code=401, detail="Invalid token: missing subject")
    try:
        role = Role(payload.get("role"))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token: unknown role")
    return Requester(id=str(subject), role=role)


def require_role(role: Role):
    def dependency(credentials: HTTPAuthorizationCredentials = Depends(oauth2_scheme)) -> Requester:
        requester = _requester_from(credentials)
        if requester.role is not role:
            logger.warning(f"{requester.role.value} {requester.id} denied access to {role.value} route")
            raise HTTPException(status_code=403, detail="Not Authorized. Login Again.")
        return requester
    return dependency


get_current_patient = require_role(Role.PATIENT)
get_current_doctor = require_role(Role.DOCTOR)
get_current_admin = require_role(Role.ADMIN)
