"""Season competition scheduling and standings engine."""

__version__ = "0.1.0"
