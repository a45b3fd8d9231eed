import logging
import re

from pythonjsonlogger import jsonlogger

from .config import Settings


class PIIRedactingFilter(logging.Filter):
    """Masks contact numbers and e-mail addresses before records leave the process."""

    # Ten or more digits, optionally grouped by single spaces or dashes; never a YYYY-MM-DD date
    _phone_re = re.compile(r"(?<![\w-])(?!\d{4}-\d{2}-\d{2}(?!\d))\+?\d(?:[ -]?\d){9,}(?![\w-])")
    _email_re = re.compile(r"\b[\w.+-]+@[\w-]+\.[\w.-]+\b")

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            msg = record.getMessage()
        except (TypeError, ValueError):
            return True
        msg = self._email_re.sub("[REDACTED_EMAIL]", msg)
        msg = self._phone_re.sub("[REDACTED_PHONE]", msg)
        record.msg = msg
        record.args = ()
        return True


def configure_logging(settings: Settings) -> None:
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    handler = logging.StreamHandler()

    if settings.LOG_JSON:
        formatter = jsonlogger.JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s"
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s"
        )

    handler.setFormatter(formatter)
    handler.addFilter(PIIRedactingFilter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    # Reduce noisy loggers
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
