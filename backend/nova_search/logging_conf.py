import logging
import re

from .config import settings

_BEARER_RE = re.compile(r"(Bearer\s+)[A-Za-z0-9._\-]+")
_API_KEY_RE = re.compile(r"""(["']?api_key["']?\s*[:=]\s*["']?)[^"',\s}]+""", re.IGNORECASE)


class RedactingFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        # Never log raw query text or attachment bodies.
        blocked_markers = ["QUERY_TEXT=", "FILE_TEXT="]
        for m in blocked_markers:
            if m in msg:
                record.msg = "REDACTED_LOG_BLOCKED"
                record.args = ()
                return True

        masked = _API_KEY_RE.sub(r"\1***", _BEARER_RE.sub(r"\1***", msg))
        if masked != msg:
            record.msg = masked
            record.args = ()
        return True


def setup_logging():
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
    root = logging.getLogger()
    redactor = RedactingFilter()
    root.addFilter(redactor)
    # Filters on the root logger do not see records propagated from children.
    for handler in root.handlers:
        handler.addFilter(redactor)
