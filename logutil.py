import os
import threading
import config

LEVELS = {"DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40}

_COLORS = {
    "DEBUG": "\x1b[2m",
    "WARN": "\x1b[33m",
    "ERROR": "\x1b[31m",
}


def enabled(level):
    threshold = LEVELS.get(getattr(config, "LOG_LEVEL", "INFO"), 20)
    return LEVELS.get(level, 20) >= threshold


def log(scope, msg, level="INFO"):
    if not enabled(level):
        return
    pid = os.getpid()
    thread = threading.current_thread().name
    text = f"[{level} pid{pid} thr{thread} {scope}] {msg}"
    use_color = getattr(config, "LOG_COLOR", True) and os.getenv("NO_COLOR") is None
    if use_color and level in _COLORS:
        text = f"{_COLORS[level]}{text}\x1b[0m"
    print(text)


def format_fields(fields):
    parts = []
    for key in sorted(fields):
        value = fields[key]
        if isinstance(value, float):
            value = f"{value:.6g}"
        parts.append(f"{key}={value}")
    return " ".join(parts)


def event(scope, name, level="INFO", **fields):
    """Log a structured diagnostic event as `name key=value ...`."""
    if fields:
        log(scope, f"{name} {format_fields(fields)}", level=level)
    else:
        log(scope, name, level=level)
