"""
Event logger utility for authentication events.
"""
import sys
import logging
import os

from ..config import settings

# Configure file and stdout logging
log_dir = os.getenv("LOG_DIR", settings.LOG_DIR)

# Create handlers list
handlers = [logging.StreamHandler(sys.stdout)]

# Try to add file handler, but continue without it if directory creation fails
try:
    os.makedirs(log_dir, exist_ok=True)
    handlers.append(logging.FileHandler(f"{log_dir}/auth_events.log"))
except (OSError, PermissionError) as e:
    # Log to stderr if file logging setup fails
    print(f"WARNING: Could not set up file logging: {e}", file=sys.stderr)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s:%(message)s",
    handlers=handlers
)

logger = logging.getLogger(__name__)


ALLOWED_EVENT_TYPES = {
    "register",
    "login_success",
    "login_failure",
    "biometric_login_success",
    "biometric_login_failure",
    "biometric_key_updated",
    "biometric_key_conflict",
}


def log_auth_event(
    event_type: str,
    user_id: str = None,
    email: str = None,
) -> None:
    """
    Log an authentication event.

    Only identifiers are logged; passwords, hashes, biometric keys and
    tokens never reach the log.

    Args:
        event_type: One of ALLOWED_EVENT_TYPES
        user_id: Id of the user concerned, when known
        email: Email the request referred to, when known

    Raises:
        ValueError: If event_type is invalid
    """
    if event_type not in ALLOWED_EVENT_TYPES:
        raise ValueError(
            f"Invalid event_type '{event_type}'. Must be one of: {', '.join(sorted(ALLOWED_EVENT_TYPES))}"
        )

    logger.info("AUTH %s user_id=%s email=%s", event_type, user_id, email)
