import json, logging, sys
from datetime import datetime, timezone
from typing import Optional

from jwsjson.core.config import LOG_FILE, LOG_LEVEL

class JsonFormatter(logging.Formatter):
    def format(self, record):
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for k in ("request_id","route","remote_addr","algorithm","code"):
            if hasattr(record, k):
                payload[k] = getattr(record, k)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)

def configure_logging(log_file: Optional[str] = None, log_level: Optional[str] = None):
    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(JsonFormatter())
    handlers: list[logging.Handler] = [console_handler]

    # File handler only when configured (always append)
    log_file = log_file or LOG_FILE
    if log_file:
        file_handler = logging.FileHandler(log_file, mode='a')
        file_handler.setFormatter(JsonFormatter())
        handlers.append(file_handler)

    root = logging.getLogger()
    # JWS_LOG_LEVEL env var (default: INFO)
    log_level = (log_level or LOG_LEVEL).upper()
    root.setLevel(getattr(logging, log_level, logging.INFO))
    root.handlers = handlers
