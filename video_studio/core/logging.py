"""
Structured logging for the studio, built on structlog.

Every process run gets its own log file under
settings.logs_dir, named studio_YYYYMMDD_HHMMSS.log; older run files beyond
settings.log_runs_to_keep are pruned at startup. Turn events carry their
turn_id explicitly, while request-scoped fields (request_id) travel through
structlog contextvars via bind_context()/clear_context().
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import structlog
from structlog.typing import Processor

from video_studio.core.config import settings

LOG_FILE_PREFIX = "studio_"


def _prune_runs(logs_dir: Path, keep: int) -> None:
    """Remove run logs so that at most `keep` of the newest remain.

    Run files are named by timestamp, so name order is run order.
    """
    runs = sorted(logs_dir.glob(f"{LOG_FILE_PREFIX}*.log"), reverse=True)
    for stale in runs[keep:]:
        try:
            stale.unlink()
        except FileNotFoundError:
            continue


def open_run_log(logs_dir: Path, keep: int) -> Path:
    """Prepare logs_dir for a new run and return the new run's log path."""
    logs_dir.mkdir(parents=True, exist_ok=True)
    # Room for the file this run is about to create
    _prune_runs(logs_dir, keep=max(keep - 1, 0))
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return logs_dir / f"{LOG_FILE_PREFIX}{stamp}.log"


def _render_processors(debug: bool) -> List[Processor]:
    """Event-dict enrichment followed by the renderer for this mode."""
    processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ExtraAdder(),
    ]
    if debug:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors += [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    return processors


def _install_handlers(log_file: Path, level: int) -> None:
    """Route the root logger to stderr and to log_file, replacing old handlers."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)
    root.setLevel(level)

    plain = logging.Formatter("%(message)s")
    for handler in (logging.StreamHandler(), logging.FileHandler(log_file, mode="w")):
        handler.setFormatter(plain)
        root.addHandler(handler)


def configure_logging(
    logs_dir: Optional[Path] = None,
    log_runs_to_keep: Optional[int] = None,
    level: Optional[str] = None,
) -> Path:
    """Configure structlog and the stdlib root logger for this run.

    Safe to call more than once; each call starts a fresh run file.

    Args:
        logs_dir: Directory for run logs (default: settings.logs_dir)
        log_runs_to_keep: Run files to retain (default: settings.log_runs_to_keep)
        level: Minimum level name (default: settings.log_level)

    Returns:
        Path of the log file for this run
    """
    log_file = open_run_log(
        Path(logs_dir or settings.logs_dir),
        keep=log_runs_to_keep or settings.log_runs_to_keep,
    )
    numeric_level = logging.getLevelName((level or settings.log_level).upper())

    _install_handlers(log_file, numeric_level)
    structlog.configure(
        processors=_render_processors(settings.debug),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return log_file


def get_logger(name: str) -> structlog.BoundLogger:
    """Module logger; use as `log = get_logger(__name__)`."""
    return structlog.get_logger(name)


def bind_context(**kwargs) -> None:
    """Attach fields (e.g. request_id) to every log event in this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
