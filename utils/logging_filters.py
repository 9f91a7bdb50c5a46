import logging
import re
from typing import Iterable

RE_ID = re.compile(r"\b(\d[\d\- ]{8,})\b")
REDACTED = "[REDACTED]"

def redact_secrets(s: str, secrets: Iterable[str] = ()) -> str:
    for secret in secrets:
        if secret:
            s = s.replace(secret, REDACTED)
    return s

def redact(s: str, secrets: Iterable[str] = ()) -> str:
    return RE_ID.sub(REDACTED, redact_secrets(s, secrets))


class SecretRedactingFilter(logging.Filter):
    """Scrubs configured secrets and long ID-like numbers from log records"""

    def __init__(self, secrets: Iterable[str] = ()):
        super().__init__()
        self.secrets = tuple(s for s in secrets if s)

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except Exception:
            return True
        clean = redact(message, self.secrets)
        if clean != message:
            record.msg = clean
            record.args = None
        return True


def install_redaction(secrets: Iterable[str], logger: logging.Logger = None) -> SecretRedactingFilter:
    """Attach one filter to every handler of the given (default: root) logger"""
    target = logger or logging.getLogger()
    flt = SecretRedactingFilter(secrets)
    for handler in target.handlers:
        existing = [f for f in handler.filters if isinstance(f, SecretRedactingFilter)]
        if existing:
            existing[0].secrets = tuple(dict.fromkeys(existing[0].secrets + flt.secrets))
        else:
            handler.addFilter(flt)
    return flt
