import logging
import sys

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

COLORS = {
    logging.DEBUG: "\033[0;36m",
    logging.INFO: "",
    SUCCESS: "\033[0;32m",
    logging.WARNING: "\033[1;33m",
    logging.ERROR: "\033[0;31m",
    logging.CRITICAL: "\033[0;31m",
}
RESET = "\033[0m"


class ColorFormatter(logging.Formatter):
    """Prefixes each record with its level name, coloured when writing to a terminal."""

    def __init__(self, fmt=None, use_color=None):
        super().__init__(fmt)
        self.use_color = sys.stdout.isatty() if use_color is None else use_color

    def format(self, record):
        message = super().format(record)
        color = COLORS.get(record.levelno, "")
        if self.use_color and color:
            return f"{color}{message}{RESET}"
        return message


logger = logging.getLogger("HomeFerry")
logger.setLevel(logging.INFO)

if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    # formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    formatter = ColorFormatter('%(levelname)s - %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def success(message, *args):
    logger.log(SUCCESS, message, *args)
