"""
Compositor Client

The only boundary that talks to the compositor. Every call is a fresh,
synchronous round-trip through ``hyprctl``; nothing is cached between calls.
"""

from __future__ import annotations
import json
import logging
import math
import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, List, Optional, Sequence, Tuple

from .geometry import PixelRect, ScreenGeometry

logger = logging.getLogger(__name__)

QUERY_TIMEOUT = 3.0
DISPATCH_TIMEOUT = 1.0
NOTIFY_TIMEOUT = 1.0

APP_NAME = "Hypr Grid Manager"

ERROR_MARKERS = ("error", "failed")
ACK_TOKEN = "ok"

# Window handle: the compositor's window address (e.g. "0x55d0c7a1b2c0")
WindowHandle = str


class WindowMode(Enum):
    """Window mode as reported by the compositor."""

    FLOATING = auto()
    TILED = auto()
    UNKNOWN = auto()


@dataclass(frozen=True)
class WindowInfo:
    """Snapshot of a window from a compositor query."""

    handle: WindowHandle
    window_class: str = ""
    title: str = ""
    mode: WindowMode = WindowMode.UNKNOWN
    rect: Optional[PixelRect] = None
    workspace_id: int = 0

    @classmethod
    def from_json(cls, data: dict) -> Optional["WindowInfo"]:
        """Build from a hyprctl client object; None if it has no address."""
        address = data.get("address")
        if not address:
            return None

        floating = data.get("floating")
        if isinstance(floating, bool):
            mode = WindowMode.FLOATING if floating else WindowMode.TILED
        else:
            mode = WindowMode.UNKNOWN

        rect = None
        at, size = data.get("at"), data.get("size")
        if _is_pair(at) and _is_pair(size):
            rect = PixelRect(int(at[0]), int(at[1]), int(size[0]), int(size[1]))

        workspace = data.get("workspace")
        workspace_id = _to_int(workspace.get("id")) if isinstance(workspace, dict) else None

        return cls(
            handle=str(address),
            window_class=str(data.get("class", "")),
            title=str(data.get("title", "")),
            mode=mode,
            rect=rect,
            workspace_id=workspace_id or 0,
        )


def _is_pair(value: Any) -> bool:
    return (
        isinstance(value, (list, tuple))
        and len(value) == 2
        and all(_to_int(v) is not None for v in value)
    )


def _to_int(value: Any) -> Optional[int]:
    """Convert a JSON number to int; None for anything else, including NaN and infinity."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return int(value)


def interpret_command_result(raw: Optional[str]) -> bool:
    """
    Infer success of a dispatch command from its free-text response.

    The compositor does not return structured status codes: an empty
    response or the acknowledgement token counts as success, anything
    containing an error marker as failure. ``None`` (no response at all,
    e.g. timeout) is failure.
    """
    if raw is None:
        return False
    text = raw.strip()
    if not text or text.lower() == ACK_TOKEN:
        return True
    lowered = text.lower()
    return not any(marker in lowered for marker in ERROR_MARKERS)


class CompositorClient(ABC):
    """Abstract command/query channel to the compositor."""

    @abstractmethod
    def is_running(self) -> bool:
        """Check whether the compositor is reachable."""
        pass

    @abstractmethod
    def query_focused_window(self) -> Optional[WindowInfo]:
        """Get the focused window, or None if there is none."""
        pass

    @abstractmethod
    def query_focused_screen(self) -> Optional[ScreenGeometry]:
        """Get the focused screen geometry, or None if unavailable."""
        pass

    @abstractmethod
    def query_window_mode(self, handle: WindowHandle) -> WindowMode:
        """Get the current mode of a window."""
        pass

    @abstractmethod
    def query_window_geometry(self, handle: WindowHandle) -> Optional[PixelRect]:
        """Get the current geometry of a window, or None if unavailable."""
        pass

    @abstractmethod
    def count_windows_in_current_workspace(self) -> int:
        """Count windows on the active workspace, excluding special workspaces."""
        pass

    @abstractmethod
    def toggle_floating_mode(self, handle: WindowHandle) -> bool:
        """Toggle a window between floating and tiled."""
        pass

    @abstractmethod
    def move_and_resize(self, handle: WindowHandle, rect: PixelRect) -> bool:
        """Move and resize a window to exact pixel geometry."""
        pass

    @abstractmethod
    def clear_window_rules(self) -> bool:
        """Drop transient window rules."""
        pass

    @abstractmethod
    def notify(self, title: str, body: str, timeout_ms: int = 3000) -> bool:
        """Show a desktop notification (best-effort)."""
        pass


# Runner signature: (argv, timeout) -> (exit code, stdout, stderr), or None
# when the process could not be run or timed out.
Runner = Callable[[Sequence[str], float], Optional[Tuple[int, str, str]]]


def run_process(argv: Sequence[str], timeout: float) -> Optional[Tuple[int, str, str]]:
    """Run a process to completion with a bounded timeout."""
    try:
        proc = subprocess.run(
            list(argv),
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        logger.warning(f"{argv[0]} timed out after {timeout}s: {' '.join(argv[1:])}")
        return None
    except OSError as e:
        logger.warning(f"Failed to run {argv[0]}: {e}")
        return None
    return proc.returncode, proc.stdout, proc.stderr


class HyprctlClient(CompositorClient):
    """CompositorClient backed by the ``hyprctl`` command line tool."""

    def __init__(
        self,
        hyprctl: str = "hyprctl",
        runner: Runner = run_process,
        which: Callable[[str], Optional[str]] = shutil.which,
    ):
        """Initialize the client.

        Args:
            hyprctl: Name or path of the hyprctl executable
            runner: Process runner (replaceable for tests)
            which: Executable lookup used to pick a notification tool
        """
        self.hyprctl = hyprctl
        self._run = runner
        self._which = which

    # Transport

    def _hyprctl(self, args: Sequence[str], timeout: float) -> Optional[str]:
        """Run hyprctl; stderr is returned on a non-zero exit."""
        result = self._run([self.hyprctl, *args], timeout)
        if result is None:
            return None
        code, stdout, stderr = result
        if code != 0:
            logger.warning(f"hyprctl error (exit code {code}): {stderr.strip()}")
            return stderr or f"error: exit code {code}"
        return stdout

    def _query(self, *args: str) -> Any:
        """Run a JSON query; None on timeout or malformed output."""
        output = self._hyprctl([*args, "-j"], QUERY_TIMEOUT)
        if output is None:
            return None
        try:
            return json.loads(output)
        except ValueError:
            logger.warning(f"Malformed JSON from hyprctl {' '.join(args)}")
            return None

    def _dispatch(self, command: str) -> bool:
        raw = self._hyprctl(["dispatch", command], DISPATCH_TIMEOUT)
        ok = interpret_command_result(raw)
        logger.debug(f"dispatch {command!r} -> {raw!r} ({'ok' if ok else 'failed'})")
        return ok

    def _clients(self) -> List[WindowInfo]:
        data = self._query("clients")
        if not isinstance(data, list):
            return []
        windows = []
        for item in data:
            if isinstance(item, dict):
                info = WindowInfo.from_json(item)
                if info is not None:
                    windows.append(info)
        return windows

    def _find_window(self, handle: WindowHandle) -> Optional[WindowInfo]:
        for window in self._clients():
            if window.handle == handle:
                return window
        return None

    # Queries

    def is_running(self) -> bool:
        result = self._run(["pgrep", "-x", "Hyprland"], QUERY_TIMEOUT)
        return result is not None and result[0] == 0

    def query_focused_window(self) -> Optional[WindowInfo]:
        data = self._query("activewindow")
        if not isinstance(data, dict):
            return None
        return WindowInfo.from_json(data)

    def query_focused_screen(self) -> Optional[ScreenGeometry]:
        data = self._query("monitors")
        if not isinstance(data, list):
            logger.warning("Failed to parse monitor data")
            return None

        monitors = [m for m in data if isinstance(m, dict)]
        if not monitors:
            return None
        monitor = next((m for m in monitors if m.get("focused")), monitors[0])

        try:
            width = int(monitor.get("width", 0))
            height = int(monitor.get("height", 0))
            scale = float(monitor.get("scale", 1.0))
        except (TypeError, ValueError, OverflowError):
            logger.warning(f"Invalid geometry for monitor {monitor.get('name')}")
            return None

        if not math.isfinite(scale) or scale <= 0.0:
            scale = 1.0
        return ScreenGeometry(width, height, scale)

    def query_window_mode(self, handle: WindowHandle) -> WindowMode:
        window = self._find_window(handle)
        if window is None:
            return WindowMode.UNKNOWN
        return window.mode

    def query_window_geometry(self, handle: WindowHandle) -> Optional[PixelRect]:
        window = self._find_window(handle)
        return window.rect if window else None

    def current_workspace_id(self) -> Optional[int]:
        data = self._query("activeworkspace")
        if not isinstance(data, dict) or "id" not in data:
            logger.warning("Failed to parse active workspace data")
            return None
        return _to_int(data["id"])

    def count_windows_in_current_workspace(self) -> int:
        workspace_id = self.current_workspace_id()
        if workspace_id is None or workspace_id <= 0:
            return 0
        count = sum(1 for w in self._clients() if w.workspace_id == workspace_id)
        logger.debug(f"Found {count} windows in workspace {workspace_id}")
        return count

    # Commands

    def toggle_floating_mode(self, handle: WindowHandle) -> bool:
        return self._dispatch(f"togglefloating address:{handle}")

    def move_and_resize(self, handle: WindowHandle, rect: PixelRect) -> bool:
        moved = self._dispatch(
            f"movewindowpixel exact {rect.x} {rect.y},address:{handle}"
        )
        resized = self._dispatch(
            f"resizewindowpixel exact {rect.width} {rect.height},address:{handle}"
        )
        return moved and resized

    def clear_window_rules(self) -> bool:
        raw = self._hyprctl(["reload"], QUERY_TIMEOUT)
        return interpret_command_result(raw)

    def notify(self, title: str, body: str, timeout_ms: int = 3000) -> bool:
        notify_send = self._which("notify-send")
        if notify_send:
            argv = [notify_send, "-a", APP_NAME, title, body, "-t", str(timeout_ms)]
        else:
            zenity = self._which("zenity")
            if not zenity:
                logger.debug("No notification tool available")
                return False
            argv = [zenity, "--notification", "--text", f"{title}: {body}"]

        result = self._run(argv, NOTIFY_TIMEOUT)
        return result is not None and result[0] == 0
