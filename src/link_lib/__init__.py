"""link-lib — link a local npm library into an application for development.

Wraps ``npm link`` / ``npm unlink`` / ``npm install`` with link-state
detection, peer-dependency warnings and faithful restore on teardown.
"""

from link_lib.version import __version__

__all__: list[str] = ["__version__"]
