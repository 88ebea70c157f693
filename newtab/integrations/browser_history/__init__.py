from .history_source import ChromeHistorySource

__all__ = ['ChromeHistorySource']
