import logging
import sys


class NamespaceFilter(logging.Filter):
    def __init__(self, allowed_namespaces=None):
        super().__init__()
        self.allowed_namespaces = allowed_namespaces if allowed_namespaces is not None else []

    def filter(self, record):
        if not self.allowed_namespaces:
            return True # If no namespaces are specified, allow all records
        return any(record.name.startswith(ns) for ns in self.allowed_namespaces)


log_formatter = logging.Formatter(
    fmt="%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

app_logger = logging.getLogger("ckms")
app_logger.setLevel(logging.INFO)

console_handler = logging.StreamHandler(sys.stdout)
console_handler.setFormatter(log_formatter)

# --- Namespace-based Filter (Optional) ---
# To only see logs from the reports feature and the app entry point:
#
# allowed_log_namespaces = ["ckms.features.reports", "ckms.main"]
# console_handler.addFilter(NamespaceFilter(allowed_log_namespaces))

app_logger.addHandler(console_handler)

# Row-source failures are logged at ERROR; query timing at DEBUG.
logging.getLogger("ckms.features.reports").setLevel(logging.DEBUG)

# Quieter SQL logging unless explicitly wanted
logging.getLogger("tortoise").setLevel(logging.WARNING)
