"""New-tab dashboard: merged calendar schedule, AI chat history and weather."""

__version__ = "1.0.0"
