"""
Local test page server — serves the bundled webroot at http://localhost:<port>
and opens it in the default browser.

The page uses WebRTC, which needs a secure context; localhost counts as one.

Usage:
    testpage 8080            # after pip install
    python -m testpage 8080
"""
import functools
import socket
import sys
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

from .openurl import OpenError, open_url


HOST = "127.0.0.1"
WEBROOT_DIRNAME = "webroot"
WEBRTC_ADVISORY = (
    'You must disable "Anonymize local IPs exposed by WebRTC" flag in '
    "Chrome-based browsers: chrome://flags/#enable-webrtc-hide-local-ips-with-mdns"
)


class WebrootNotFound(FileNotFoundError):
    def __init__(self, candidates):
        super().__init__(f"no {WEBROOT_DIRNAME} directory in: {', '.join(map(str, candidates))}")
        self.candidates = list(candidates)


def executable_dir():
    """Directory of the running program.

    For a frozen build that is the bundled executable, otherwise the script
    that was launched. A host that can't tell us is broken; let it crash.
    """
    exe = sys.executable if getattr(sys, "frozen", False) else sys.argv[0]
    if not exe:
        raise RuntimeError("cannot determine path of the running executable")
    return Path(exe).resolve().parent


def source_dir():
    return Path(__file__).resolve().parent


def locate_webroot():
    """Return the first existing webroot: next to the executable, then next to this file."""
    candidates = [
        executable_dir() / WEBROOT_DIRNAME,
        source_dir() / WEBROOT_DIRNAME,
    ]
    for path in candidates:
        if path.is_dir():
            return path
    raise WebrootNotFound(candidates)


def _parse_port(text):
    """Port number, or a TCP service name such as "http"."""
    if not text:
        return 0  # any free port
    try:
        return int(text)
    except ValueError:
        return socket.getservbyname(text, "tcp")


def make_server(webroot, port):
    handler = functools.partial(SimpleHTTPRequestHandler, directory=str(webroot))
    return ThreadingHTTPServer((HOST, _parse_port(port)), handler)


def main(argv=None):
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        print("Usage: testpage <port>", file=sys.stderr)
        sys.exit(1)
    port = args[0]

    try:
        webroot = locate_webroot()
    except WebrootNotFound:
        print("Failed to find webroot directory", file=sys.stderr)
        sys.exit(1)

    try:
        httpd = make_server(webroot, port)
    except (OSError, OverflowError) as e:
        print(f"Failed to start HTTP listener: {e}", file=sys.stderr)
        sys.exit(1)

    url = f"http://localhost:{httpd.server_address[1]}"
    print(f"Serving files from {webroot}")
    print(f"Use browser to open {url}")
    print(WEBRTC_ADVISORY, flush=True)

    try:
        open_url(url)
    except OpenError:
        pass  # the URL is printed above

    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        print("\nServer stopped.")
    finally:
        httpd.server_close()


if __name__ == "__main__":
    main()
