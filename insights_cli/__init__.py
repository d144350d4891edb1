"""insights-cli: stream AI insights about a media collection to the terminal."""

__version__ = "0.1.0"
