"""framescope - static framework and package detection for Android apps."""

__version__ = "0.1.0"
