"""beads-lite: a small dependency-aware issue tracker."""

__version__ = "0.1.0"
