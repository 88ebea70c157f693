"""
External data sources: Google credentials and Calendar, browser history,
and the weather forecast.
"""
