"""Single source of truth for the link-lib version string."""

__version__: str = "0.1.0"
