"""Middleware module - Security and HTTP middleware"""
from .security import (
    SecurityHeadersMiddleware, HTTPSRedirectMiddleware,
    resolve_cors_configuration
)

__all__ = [
    'SecurityHeadersMiddleware', 'HTTPSRedirectMiddleware',
    'resolve_cors_configuration'
]
