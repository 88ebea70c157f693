from .credentials import GoogleCredentialProvider, SCOPES

__all__ = ['GoogleCredentialProvider', 'SCOPES']
