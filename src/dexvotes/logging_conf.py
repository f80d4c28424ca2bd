import logging, sys, os

def setup_logging(level_name=None):
    logger = logging.getLogger("dexvotes")
    if logger.handlers:
        return logger
    level = logging.INFO if os.getenv("ENV","dev")!="dev" else logging.DEBUG
    if level_name:
        named = logging.getLevelName(level_name.strip().upper())
        if isinstance(named, int):
            level = named
    handler = logging.StreamHandler(sys.stdout)
    fmt = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    handler.setFormatter(fmt)
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
