import logging
import os

DEFAULT_LEVEL = "INFO"


def configure_logging(level=None):
    """
    Sets the root log level from ``level`` or LOG_LEVEL. Lambda installs its
    own handler on the root logger. Unknown level names fall back to INFO.
    """
    level = (level or os.environ.get("LOG_LEVEL") or DEFAULT_LEVEL).upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    if not isinstance(logging.getLevelName(level), int):
        root.setLevel(DEFAULT_LEVEL)
        logging.getLogger(__name__).warning("Unknown log level %r, using %s",
                                            level, DEFAULT_LEVEL)
        return
    root.setLevel(level)
