"""
variant_sdk.tier0_core.logging
───────────────────────────────
Structured logs for cookie issue and validation events. Key material and
raw cookie values are redacted before anything reaches a sink.

Minimal stack: structlog over the stdlib logging tree (stdout JSON or console)
Configure via: VariantConfig.log_level / log_format
               (VARIANT_LOG_LEVEL, VARIANT_LOG_FORMAT=json|console)
"""
from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from variant_sdk.tier0_core.config import VariantConfig, get_config


# ── Redaction processor ───────────────────────────────────────────────────────

_REDACT_KEYS = frozenset({
    "password", "secret", "secret_key", "key", "hmac_key", "token",
    "signature", "expected_signature", "cookie", "cookie_header",
    "authorization", "credential", "private_key",
})

REDACTED = "[REDACTED]"


def _redact_processor(
    logger: Any, method: str, event_dict: dict
) -> dict:
    """Strip key material and raw cookies from log records before output."""
    for key in list(event_dict.keys()):
        if key.lower() in _REDACT_KEYS:
            event_dict[key] = REDACTED
    return event_dict


# ── Configuration ─────────────────────────────────────────────────────────────

_PRE_CHAIN: list[Any] = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    _redact_processor,
]

_handler: logging.Handler | None = None
_configured = False


def _renderer(log_format: str) -> Any:
    if log_format.lower() == "console":
        return structlog.dev.ConsoleRenderer(colors=False)
    return structlog.processors.JSONRenderer(sort_keys=True)


def configure_logging(config: VariantConfig | None = None, *, stream: Any = None) -> None:
    """
    Route SDK logs through one handler (stdout unless *stream* is given)
    using the configured level and format. Called lazily by get_logger();
    call it again after changing settings to apply them. Level filtering
    happens on the stdlib logger, so loggers created before a reconfigure
    pick up the new level.
    """
    global _handler, _configured
    cfg = config or get_config()
    level = logging.getLevelName(cfg.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[structlog.stdlib.filter_by_level] + _PRE_CHAIN + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_PRE_CHAIN,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(cfg.log_format),
        ],
    ))

    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)
    root.addHandler(handler)
    root.setLevel(level)
    _handler = handler
    _configured = True


# ── Public API ────────────────────────────────────────────────────────────────

def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Return a structured logger bound to the given name.

    Usage:
        log = get_logger(__name__)
        log.info("variant.issued", experiment="landing", variant="A")
        log.warning("cookie.malformed", cookie_name="ab_variant_landing")
    """
    if not _configured:
        configure_logging()
    return structlog.get_logger(name or __name__)


__all__ = ["get_logger", "configure_logging", "REDACTED"]
