import logging
import re

_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"(x-rapidapi-key['\"]?\s*[:=]\s*['\"]?)[^\s'\",}]+", re.IGNORECASE), r"\1<REDACTED>"),
    (re.compile(r"(Bearer\s+)[A-Za-z0-9._\-]+"), r"\1<REDACTED>"),
    (re.compile(r"([?&](?:api_)?key=)[^&\s]+", re.IGNORECASE), r"\1<REDACTED>"),
]


def redact(text: str) -> str:
    for pattern, repl in _PATTERNS:
        text = pattern.sub(repl, text)
    return text


class SensitiveDataFilter(logging.Filter):
    """
    Redacts provider credentials from log records before they are emitted.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    k: redact(v) if isinstance(v, str) else v for k, v in record.args.items()
                }
            else:
                record.args = tuple(redact(a) if isinstance(a, str) else a for a in record.args)
        return True


def setup_logging(level: int | str = logging.INFO) -> None:
    """
    Set up root logger with a stream handler and credential redaction.
    """
    root = logging.getLogger()
    if root.handlers:
        return  # already configured
    root.setLevel(level)
    fmt = logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    ch.addFilter(SensitiveDataFilter())
    root.addHandler(ch)
