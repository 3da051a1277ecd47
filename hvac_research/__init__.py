"""Texas HVAC acquisition research dashboard."""

__version__ = "0.1.0"
