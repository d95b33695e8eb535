"""Utility functions for error reporting."""

import os
from collections.abc import Mapping, Set
from types import FrameType
from typing import Any, List, Optional, Tuple

from .models import StackFrame

# Separator between an owning type and the function, as in ``Title.render``.
CALL_OPERATOR = "."


def _safe_str(x: Any) -> str:
    try:
        return str(x)
    except Exception:
        try:
            return repr(x)
        except Exception:
            return f"<unprintable {type(x).__name__}>"


def _split_qualname(qualname: str) -> Tuple[Optional[str], str]:
    """Split ``Owner.method`` into owner and function name.

    Functions nested in other functions (``outer.<locals>.inner``) have no
    owning type.
    """
    owner, sep, function = qualname.rpartition(".")
    if not sep or owner.endswith("<locals>"):
        return None, function
    return owner, function


def _frame_file(filename: str) -> str:
    # pseudo files such as <string> or <frozen importlib._bootstrap>
    if filename.startswith("<") and filename.endswith(">"):
        return filename
    return os.path.abspath(filename)


def capture_stack(frame: Optional[FrameType], max_frames: int = 200) -> List[StackFrame]:
    """
    Walk the call stack outward starting at ``frame`` (the innermost frame
    to include) and describe each frame.
    """
    frames: List[StackFrame] = []
    while frame is not None and len(frames) < max_frames:
        code = frame.f_code
        qualname = getattr(code, "co_qualname", code.co_name)
        owner, function = _split_qualname(qualname)
        frames.append(
            StackFrame(
                file=_frame_file(code.co_filename),
                line=frame.f_lineno,
                function=function,
                owner=owner,
                operator=CALL_OPERATOR if owner else None,
            )
        )
        frame = frame.f_back
    return frames


def rewrite_path(path: Optional[str], root: Optional[str]) -> Optional[str]:
    """
    Rewrite ``path`` relative to the installation root.

    Only paths strictly below ``root`` (``root`` followed by a separator)
    are rewritten, so ``/srv/app/x.py`` becomes ``./x.py`` for root
    ``/srv/app`` while ``/srv/app2/x.py`` and ``/srv/app`` stay as given.
    """
    if not path or not root:
        return path
    root = root.rstrip(os.sep) or os.sep
    prefix = root if root.endswith(os.sep) else root + os.sep
    if path.startswith(prefix) and len(path) > len(prefix):
        return "." + os.sep + path[len(prefix):]
    return path


def export_value(value: Any, indent: int = 0) -> str:
    """Render a value as parseable, multi-line text for debugging.

    Mappings keep their insertion order; scalars are rendered with repr().
    """
    pad = " " * indent
    inner = " " * (indent + 4)

    if isinstance(value, Mapping):
        if not value:
            return "{}"
        lines = ["{"]
        for k, v in value.items():
            lines.append(f"{inner}{k!r}: {export_value(v, indent + 4)},")
        lines.append(pad + "}")
        return "\n".join(lines)

    if isinstance(value, (list, tuple)):
        open_, close = ("[", "]") if isinstance(value, list) else ("(", ")")
        if not value:
            return open_ + close
        lines = [open_]
        for item in value:
            lines.append(f"{inner}{export_value(item, indent + 4)},")
        lines.append(pad + close)
        return "\n".join(lines)

    if isinstance(value, Set):
        if not value:
            return f"{type(value).__name__}()"
        # sets have no stable order; sort by repr for deterministic output
        items = sorted((export_value(item, indent + 4) for item in value))
        lines = ["{"]
        for item in items:
            lines.append(f"{inner}{item},")
        lines.append(pad + "}")
        text = "\n".join(lines)
        if isinstance(value, frozenset):
            return f"frozenset({text})"
        return text

    if isinstance(value, (type(None), bool, int, float, str, bytes)):
        return repr(value)

    # Primitive or other
    return f"<{type(value).__name__}: {_safe_str(value)}>"
