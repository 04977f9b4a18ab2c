# telemetry.py
import os, sys, logging, warnings

APP_LOGGER = "contractdash"

# HTTP client and server chatter; the import pipeline logs what matters itself
NOISY_LOGGERS = (
    "urllib3", "urllib3.connectionpool", "requests",
    "httpx", "httpcore",
    "multipart", "python_multipart",
    "uvicorn.access",
)


def _force_utf8_console():
    os.environ.setdefault("PYTHONUTF8", "1")
    os.environ.setdefault("PYTHONIOENCODING", "utf-8")
    if sys.platform.startswith("win"):
        # German labels and the runner's check marks
        for stream in (sys.stdout, sys.stderr):
            reconfigure = getattr(stream, "reconfigure", None)
            if reconfigure is not None:
                reconfigure(encoding="utf-8")


def _app_logger(level: int) -> logging.Logger:
    logger = logging.getLogger(APP_LOGGER)
    # never quieter than INFO: import results are the app's main output
    logger.setLevel(min(level, logging.INFO))
    logger.propagate = False
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
    return logger


def go_quiet(default_level: str = "ERROR") -> logging.Logger:
    """
    One-time logging setup for the API and the local runner.

    Root level comes from CD_LOG_LEVEL (default ERROR), HTTP libraries are
    muted, and the ``contractdash`` logger gets its own stdout handler. Modules
    log through ``logging.getLogger("contractdash.<area>")``.
    """
    _force_utf8_console()

    level_name = os.getenv("CD_LOG_LEVEL", default_level).upper()
    level = getattr(logging, level_name, logging.ERROR)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", force=True)

    for name in NOISY_LOGGERS:
        noisy = logging.getLogger(name)
        noisy.setLevel(logging.CRITICAL)
        noisy.propagate = False

    logging.captureWarnings(True)
    warnings.simplefilter("ignore")

    return _app_logger(level)
