from .weather_client import OpenMeteoClient

__all__ = ['OpenMeteoClient']
