"""Service-layer exceptions."""


class BuildError(Exception):
    """Raised when a build cannot be created or reconfigured."""
