import logging
import re

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from keygate.utils.request_id import get_request_id

custom_theme = Theme(
    {
        "info": "dim cyan",
        "warning": "magenta",
        "error": "bold red",
        "gateway": "bold blue",
        "migration": "bold green",
    }
)

console = Console(theme=custom_theme)

REDACTED = "[redacted]"


class RedactSecretsFilter(logging.Filter):
    """Masks bearer tokens and Fernet ciphertexts before a record is emitted."""

    BEARER_PATTERN = re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+", re.I)
    # JSON fields carrying key material in provider responses
    KEY_FIELD_PATTERN = re.compile(
        r'("(?:apiKeyString|apiKey|token|access_token|accessToken)"\s*:\s*")[^"]+(")'
    )
    FERNET_PATTERN = re.compile(r"gAAAAA[A-Za-z0-9_=-]{20,}")

    def filter(self, record):
        if not isinstance(record.msg, str):
            return True

        msg = record.msg
        msg = self.BEARER_PATTERN.sub(rf"\1{REDACTED}", msg)
        msg = self.KEY_FIELD_PATTERN.sub(rf"\1{REDACTED}\2", msg)
        msg = self.FERNET_PATTERN.sub(REDACTED, msg)
        record.msg = msg
        return True


class CompactFilter(logging.Filter):
    """Prefixes the request ID and shortens UUIDs for technical density."""

    UUID_PATTERN = re.compile(
        r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.I
    )

    def filter(self, record):
        if not isinstance(record.msg, str):
            return True

        msg = record.msg.replace("keygate.", "")

        request_id = get_request_id()
        if request_id:
            msg = f"[{request_id[:8]}] {msg}"

        # a1e9166a-15f5-4ccf-b2ff-a6a92c37e645 -> a1e9..
        msg = self.UUID_PATTERN.sub(lambda m: f"{m.group(0)[:4]}..", msg)

        record.msg = msg
        return True


def setup_global_logger(log_level: str = "INFO"):
    """
    Configures the `keygate` logger using Rich for readable output.

    Module loggers (`logging.getLogger(__name__)`) propagate to it.
    """
    logger = logging.getLogger("keygate")

    level = getattr(logging, log_level.upper(), logging.INFO)
    logger.setLevel(level)

    # Avoid duplicate handlers
    if not logger.handlers:
        rich_handler = RichHandler(
            console=console,
            rich_tracebacks=True,
            markup=False,
            show_path=False,
            show_time=True,
            omit_repeated_times=True,
            keywords=["ai-gateway", "migration", "consent"],
        )

        formatter = logging.Formatter("%(message)s", datefmt="[%X]")
        rich_handler.setFormatter(formatter)
        rich_handler.addFilter(RedactSecretsFilter())
        rich_handler.addFilter(CompactFilter())
        logger.addHandler(rich_handler)

    return logger


logger = logging.getLogger("keygate")
