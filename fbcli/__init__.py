"""Far Beyond developer CLI: repository fleet management and plugin deployment."""

__version__ = "0.1.0"
