# app/logging.py
import logging
import os
from typing import Any, Dict, Optional

MAX_ARG_CHARS = 200  # file contents passed to tools can be large


def configure_logging(level: Optional[str] = None):
    logging.basicConfig(
        level=level or os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def truncate_str(s: str, limit: int = MAX_ARG_CHARS) -> str:
    if len(s) <= limit:
        return s
    return f"{s[:limit]}...[{len(s) - limit} more chars]"


def summarize_args(args: Dict[str, Any]) -> Dict[str, Any]:
    safe = dict(args)
    for k, v in list(safe.items()):
        if isinstance(v, str):
            safe[k] = truncate_str(v)
    return safe


def log_tool_call(logger: logging.Logger, name: str, args: Dict[str, Any]):
    logger.info("tool_call %s %s", name, summarize_args(args))
