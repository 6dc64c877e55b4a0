from datetime import datetime

from .config import LOG_FILE, LOG_INTERVAL


def log(message: str) -> None:
    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    line = f"[{timestamp}] {message}"
    print(line)
    try:
        with open(LOG_FILE, "a", encoding="utf-8") as f:
            f.write(line + "\n")
    except OSError:
        pass


def log_every(frame_count: int, message: str, interval: int = LOG_INTERVAL) -> None:
    """Log only on every `interval`-th frame so per-frame diagnostics stay readable."""
    if interval > 0 and frame_count % interval == 0:
        log(message)
