"""
Hierarchical runtime tracing for Contour Fit.

Nested spans with timing and one-off events, written to stderr and
optionally to a file, as text or JSON lines. Tracing is off by default and
costs a single flag check per call while disabled.
"""

import functools
import hashlib
import json
import sys
import time
from contextlib import contextmanager
from datetime import datetime

import numpy as np
from pydantic import BaseModel


LEVELS = {"ERROR": 0, "WARN": 1, "INFO": 2, "DEBUG": 3}


class Tracer:
    """
    Hierarchical tracer for structured fitter logging.

    Spans nest, so events are indented under the span that produced them.
    """

    def __init__(self):
        self.enabled = False
        self.level = "INFO"
        self.json_output = False
        self._file_handle = None
        self._stack = []

    def configure(self, enabled=False, level="INFO", file_path=None, json_output=False):
        """Configure tracer settings, closing any previously opened file."""
        self.close()

        level = level.upper()
        if level not in LEVELS:
            raise ValueError(f"Unknown trace level '{level}', expected one of {list(LEVELS)}")

        self.enabled = enabled
        self.level = level
        self.json_output = json_output

        if file_path and enabled:
            self._file_handle = open(file_path, "w", encoding="utf-8")

    def close(self):
        """Close file handle if open."""
        if self._file_handle:
            self._file_handle.close()
            self._file_handle = None

    def is_enabled_for(self, level):
        """Check if messages at this level would be written."""
        if not self.enabled:
            return False
        return LEVELS.get(level, LEVELS["INFO"]) <= LEVELS[self.level]

    def _write(self, level, location, message, meta=None):
        now = datetime.now()
        timestamp = now.strftime("%H:%M:%S.") + f"{now.microsecond // 1000:03d}"
        depth = len(self._stack)

        if self.json_output:
            line = json.dumps({
                "timestamp": timestamp,
                "level": level,
                "depth": depth,
                "location": location,
                "message": message,
                "meta": {k: summarize(v) for k, v in (meta or {}).items()},
            })
        else:
            line = f"{timestamp} {level:<5} {'  ' * depth}{location}  {message}"

        print(line, file=sys.stderr)
        if self._file_handle:
            self._file_handle.write(line + "\n")
            self._file_handle.flush()

    @contextmanager
    def span(self, name, module="", **meta):
        """
        Context manager for a traced span.

        Logs start and end with elapsed time. An exception escaping the span
        is logged at ERROR level and re-raised.
        """
        if not self.enabled:
            yield
            return

        location = f"{module}:{name}" if module else name
        meta_str = " ".join(f"{k}={summarize(v)}" for k, v in meta.items())
        if self.is_enabled_for("INFO"):
            self._write("INFO", location, f"start {meta_str}".strip(), meta)

        start_time = time.perf_counter()
        self._stack.append(location)
        try:
            yield
        except Exception as e:
            self._stack.pop()
            elapsed = (time.perf_counter() - start_time) * 1000
            self._write("ERROR", location, f"failed dt={elapsed:.1f}ms error={type(e).__name__}: {str(e)[:100]}")
            raise

        self._stack.pop()
        elapsed = (time.perf_counter() - start_time) * 1000
        if self.is_enabled_for("INFO"):
            self._write("INFO", location, f"end ok dt={elapsed:.1f}ms")

    def event(self, message, level="INFO", **meta):
        """Log a one-off event within the current span."""
        if not self.is_enabled_for(level):
            return

        location = self._stack[-1] if self._stack else ""
        meta_str = " ".join(f"{k}={summarize(v)}" for k, v in meta.items())
        self._write(level, location, f"{message} {meta_str}".strip(), meta)


def summarize(obj, max_len=200):
    """
    Summarize an object for logging.

    Returns a compact string that never exceeds max_len characters.
    Contours (numpy arrays) are reduced to shape, dtype and a short hash.
    """
    try:
        result = _summarize_impl(obj)
    except Exception:
        result = f"<{type(obj).__name__}>"

    if len(result) > max_len:
        return result[:max_len - 3] + "..."
    return result


def _summarize_impl(obj):
    if obj is None:
        return "None"

    type_name = type(obj).__name__

    if isinstance(obj, np.ndarray):
        shape_str = "x".join(str(s) for s in obj.shape)
        if 0 < obj.size < 1000:
            h = hashlib.md5(obj.tobytes()).hexdigest()[:8]
            return f"ndarray({obj.dtype},{shape_str},h={h})"
        return f"ndarray({obj.dtype},{shape_str})"

    # fit results
    if isinstance(obj, BaseModel):
        if hasattr(obj, "splits") and hasattr(obj, "score"):
            return f"{type_name}(sides={len(obj.splits)},score={obj.score:.4g})"
        names = list(type(obj).model_fields)[:3]
        return f"{type_name}(fields={names}...)"

    if isinstance(obj, bool):
        return str(obj)

    if isinstance(obj, float):
        return f"{obj:.4g}"

    if isinstance(obj, (int, np.integer, np.floating)):
        return str(obj)

    if isinstance(obj, str):
        if len(obj) > 50:
            h = hashlib.md5(obj.encode()).hexdigest()[:8]
            return f"str(len={len(obj)},h={h})"
        return repr(obj)

    if isinstance(obj, (list, tuple)):
        if len(obj) <= 8 and all(isinstance(v, (int, np.integer)) for v in obj):
            return "[" + ",".join(str(v) for v in obj) + "]"
        first = type(obj[0]).__name__ if obj else "?"
        return f"{type_name}(len={len(obj)},first={first})"

    if isinstance(obj, dict):
        keys = ",".join(str(k) for k in list(obj)[:5])
        return f"dict(len={len(obj)},keys=[{keys}])"

    return f"<{type_name}>"


def trace(label=None):
    """
    Decorator to trace function execution.

    Wraps a function in a span that logs start/end with timing.
    """
    def decorator(func):
        module = func.__module__.split(".")[-1] if func.__module__ else ""
        name = label or func.__name__

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if not _tracer.enabled:
                return func(*args, **kwargs)

            with _tracer.span(name, module=module):
                return func(*args, **kwargs)

        return wrapper
    return decorator


# Global tracer instance
_tracer = Tracer()


def get_tracer():
    """Get the global tracer instance."""
    return _tracer


def configure_tracer(enabled=False, level="INFO", file_path=None, json_output=False):
    """Configure the global tracer."""
    _tracer.configure(
        enabled=enabled,
        level=level,
        file_path=file_path,
        json_output=json_output,
    )
