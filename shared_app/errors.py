"""Errors raised while bootstrapping the shared application."""


class BootError(RuntimeError):
    """The configured application factory could not be loaded."""
