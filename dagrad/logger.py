# dagrad/logger.py
import logging

from .config import get_config

_ROOT = "dagrad"


def get_logger(name: str = _ROOT) -> logging.Logger:
    """
    Return the package logger, or a child of it for a dagrad module.

    The "dagrad" logger gets one stream handler the first time it is asked
    for; its level comes from the active Config.
    """
    root = logging.getLogger(_ROOT)
    if not root.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter('[%(asctime)s][%(levelname)s][%(name)s] %(message)s')
        handler.setFormatter(formatter)
        root.addHandler(handler)
        root.setLevel(get_config().log_level)

    if name == _ROOT or name.startswith(_ROOT + "."):
        return logging.getLogger(name)
    return root.getChild(name)
