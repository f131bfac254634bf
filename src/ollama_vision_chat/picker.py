"""Image file selection through native Linux dialogs with a modal fallback."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
import logging
import os
from pathlib import Path
import shutil
import urllib.parse

LOGGER = logging.getLogger(__name__)

IMAGE_PATTERNS: tuple[str, ...] = (
    "*.png",
    "*.jpg",
    "*.jpeg",
    "*.gif",
    "*.bmp",
    "*.webp",
)

NativeDialog = Callable[[str, list[tuple[str, list[str]]] | None], Awaitable[str | None]]
ModalPrompt = Callable[[], Awaitable[str | None]]


async def _reap(proc: asyncio.subprocess.Process) -> None:
    """Kill a dialog that is still open and wait for it to exit."""
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    await proc.wait()


async def _run_dialog(cmd: list[str], timeout: float) -> str | None:
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        LOGGER.debug(
            "picker.dialog.failed",
            extra={"event": "picker.dialog.failed", "command": cmd[0], "reason": str(exc)},
        )
        return None

    try:
        stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except TimeoutError:
        LOGGER.debug(
            "picker.dialog.timeout",
            extra={"event": "picker.dialog.timeout", "command": cmd[0], "timeout": timeout},
        )
        await _reap(proc)
        return None
    except asyncio.CancelledError:
        await _reap(proc)
        raise
    if proc.returncode != 0:
        return None
    return stdout.decode().strip() or None


async def open_native_file_dialog(
    title: str = "Upload image",
    file_filter: list[tuple[str, list[str]]] | None = None,
) -> str | None:
    """Open a native Linux file picker, trying multiple backends.

    Tries xdg-desktop-portal (via gdbus), then zenity, then kdialog.
    Returns the selected file path or None if cancelled/unavailable.
    """
    gdbus_bin = shutil.which("gdbus")
    if gdbus_bin is not None:
        output = await _run_dialog(
            [
                gdbus_bin,
                "call",
                "--session",
                "--dest=org.freedesktop.portal.Desktop",
                "--object-path=/org/freedesktop/portal/desktop",
                "--method=org.freedesktop.portal.FileChooser.OpenFile",
                "",
                title,
                f"{{'handle_token': <'visionchat_{os.getpid()}'>}}",
            ],
            timeout=60,
        )
        if output and "file://" in output:
            for token in output.split():
                cleaned = token.strip("',()><[]")
                if cleaned.startswith("file://"):
                    return urllib.parse.unquote(cleaned[len("file://") :])

    zenity_bin = shutil.which("zenity")
    if zenity_bin is not None:
        cmd = [zenity_bin, "--file-selection", f"--title={title}"]
        for name, patterns in file_filter or []:
            cmd.append(f"--file-filter={name} | {' '.join(patterns)}")
        path = await _run_dialog(cmd, timeout=120)
        if path:
            return path

    kdialog_bin = shutil.which("kdialog")
    if kdialog_bin is not None:
        filter_str = " ".join(p for _, patterns in file_filter or [] for p in patterns)
        path = await _run_dialog(
            [kdialog_bin, "--getopenfilename", ".", filter_str or title], timeout=120
        )
        if path:
            return path

    return None


class FilePicker:
    """External file-selection surface for image attachments.

    Like a file input element, choosing the path that is already selected is
    not reported as a new selection until ``reset()`` clears it.
    """

    def __init__(
        self,
        native_dialog: NativeDialog = open_native_file_dialog,
        modal_prompt: ModalPrompt | None = None,
    ) -> None:
        self._native_dialog = native_dialog
        self._modal_prompt = modal_prompt
        self._active = False
        self.value: str | None = None
        self.last_directory: Path | None = None

    def set_modal_prompt(self, modal_prompt: ModalPrompt) -> None:
        self._modal_prompt = modal_prompt

    def reset(self) -> None:
        """Forget the current selection so the same file can be chosen again.

        ``last_directory`` survives so the next prompt opens where the user was.
        """
        self.value = None

    def offer(self, path: str | None) -> str | None:
        """Record a selection. Returns the path only when it changed."""
        if not path:
            return None
        normalized = str(Path(path).expanduser())
        if normalized == self.value:
            LOGGER.debug(
                "picker.unchanged",
                extra={"event": "picker.unchanged", "path": normalized},
            )
            return None
        self.value = normalized
        self.last_directory = Path(normalized).parent
        return normalized

    async def pick(self) -> str | None:
        """Ask the user for an image. Returns a newly selected path or None."""
        if self._active:
            return None
        self._active = True
        try:
            path = await self._native_dialog(
                "Upload image", [("Images", list(IMAGE_PATTERNS))]
            )
            if path is None and self._modal_prompt is not None:
                path = await self._modal_prompt()
        finally:
            self._active = False
        return self.offer(path)
