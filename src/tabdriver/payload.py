"""Script payload loading and injection."""
import logging

from .errors import SessionError, SessionStep

log = logging.getLogger(__name__)


def read_payload(path: str) -> str:
    """Return the payload file's text, verbatim."""
    log.debug("Reading payload from '%s'...", path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise SessionError(
            SessionStep.PAYLOAD_READ, f"Error occurred reading payload file: {e}"
        ) from e
    log.debug("Payload successfully read")
    return payload


def inject_payload(tab, path: str) -> None:
    """Read *path* and evaluate it in the tab; the result is discarded."""
    payload = read_payload(path)
    log.debug("Injecting payload...")
    tab.evaluate(payload, step=SessionStep.PAYLOAD_EVAL, action="executing payload")
    log.info("Payload executed successfully")
