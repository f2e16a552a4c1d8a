import logging
import sys

# 1. Set up a console handler and formatter.
# Loggers that don't have their own handlers propagate here.
console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(logging.DEBUG)
formatter = logging.Formatter(
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
console_handler.setFormatter(formatter)

# 2. Attach it to the package logger; modules log through __name__.
package_logger = logging.getLogger(__name__)
package_logger.setLevel(logging.INFO)
package_logger.addHandler(console_handler)

# 3. Suppress chatty library loggers
logging.getLogger("numba").setLevel(logging.WARNING)
logging.getLogger("matplotlib").setLevel(logging.WARNING)
logging.getLogger("PIL").setLevel(logging.WARNING)
