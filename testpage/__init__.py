"""Serve the bundled WebRTC/SIP test page on localhost and open it in a browser."""

__version__ = "0.1.0"
