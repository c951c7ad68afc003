"""
openurl.py — open a URL in the user's default web browser.

Supports macOS, Windows, Linux and Linux under WSL. Returns as soon as the
OS has accepted the request to start the opener process; the browser itself
is never waited on.

    from testpage.openurl import open_url
    open_url("http://localhost:8080")
"""

import os
import platform
import shutil
import subprocess


# wslview hands the URL to the Windows default browser from inside WSL
WSL_OPENER = "wslview"
UNIX_OPENERS = ("xdg-open", "gio", "gnome-open", "kde-open")
WSL_PROBE_FILES = ("/proc/sys/kernel/osrelease", "/proc/version")


class OpenError(Exception):
    """Base class for failures to open a URL."""


class InvalidArgument(OpenError, ValueError):
    pass


class LaunchFailed(OpenError):
    """No opener command could be started.

    `candidates` is every command that was considered, `last_error` the
    last spawn error (None if nothing could even be resolved).
    """

    def __init__(self, message, candidates=(), last_error=None):
        super().__init__(message)
        self.candidates = list(candidates)
        self.last_error = last_error


def _spawn(argv):
    # Fire and forget: no wait, no output capture.
    return subprocess.Popen(argv)


def is_wsl(system=None, environ=None, paths=WSL_PROBE_FILES):
    """Return True if running under Windows Subsystem for Linux."""
    if (system or platform.system()) != "Linux":
        return False
    env = os.environ if environ is None else environ
    if "WSL_DISTRO_NAME" in env:
        return True
    for path in paths:
        try:
            with open(path, "rb") as f:
                content = f.read()
        except OSError:
            continue
        if b"microsoft" in content.lower():
            return True
    return False


class MacOpener:
    def __init__(self, popen=_spawn):
        self.popen = popen

    def command(self, url):
        return ["open", url]

    def open(self, url):
        argv = self.command(url)
        try:
            self.popen(argv)
        except OSError as e:
            raise LaunchFailed(f"openurl: {argv[0]} failed: {e}", [argv[0]], e) from e


class WindowsOpener(MacOpener):
    # rundll32 sidesteps the quoting rules of "start" for URLs with & or ^
    def command(self, url):
        return ["rundll32", "url.dll,FileProtocolHandler", url]


class UnixOpener:
    """Try each desktop opener in turn until one starts."""

    def __init__(self, wsl=None, which=shutil.which, popen=_spawn):
        self.wsl = is_wsl() if wsl is None else wsl
        self.which = which
        self.popen = popen

    def candidates(self):
        names = [WSL_OPENER] if self.wsl else []
        names.extend(UNIX_OPENERS)
        return names

    def open(self, url):
        candidates = self.candidates()
        last_error = None
        for name in candidates:
            path = self.which(name)
            if not path:
                continue
            try:
                self.popen([path, url])
            except OSError as e:
                last_error = e
                continue
            return

        reason = last_error if last_error is not None else "no opener command found"
        raise LaunchFailed(
            f"openurl: failed to open URL using candidates {candidates}: {reason}",
            candidates,
            last_error,
        )


def opener_for(system=None, **kwargs):
    """Pick the opener for a platform.system() tag (default: this host)."""
    system = system or platform.system()
    if system in ("Darwin", "Windows"):
        cls = MacOpener if system == "Darwin" else WindowsOpener
        return cls(**{k: v for k, v in kwargs.items() if k == "popen"})
    if "wsl" not in kwargs:
        kwargs["wsl"] = is_wsl(system)
    return UnixOpener(**kwargs)


def open_url(url, system=None, **kwargs):
    """Open `url` in the default browser.

    Raises InvalidArgument for an empty URL and LaunchFailed when no opener
    could be started. Extra keyword arguments go to the opener (`popen`,
    and `which`/`wsl` on Unix).
    """
    if not url:
        raise InvalidArgument("openurl: empty URL")
    opener_for(system, **kwargs).open(url)
