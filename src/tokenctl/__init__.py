"""tokenctl: design token build planning and artifact resolution."""

__version__ = "0.1.0"
