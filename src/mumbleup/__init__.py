"""mumbleup - interactive installer for a Mumble voice server."""

__version__ = "0.3.0"
