import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level="INFO"):
    level = getattr(logging, str(level).upper(), logging.INFO)
    logger = logging.getLogger("classroom")
    logger.setLevel(level)

    # Avoid duplicate console handlers when the factory runs more than once
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(ch)
    for h in logger.handlers:
        h.setLevel(level)

    logger.propagate = False
    return logger


def get_logger(name=None):
    base = logging.getLogger("classroom")
    if not name or name == "classroom":
        return base
    return base.getChild(name[len("classroom."):] if name.startswith("classroom.") else name)
