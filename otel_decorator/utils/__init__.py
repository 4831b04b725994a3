"""
Utility helpers for otel_decorator.
"""

from otel_decorator.utils.security import DataRedactor, configure_redactor, get_redactor

__all__ = ['DataRedactor', 'configure_redactor', 'get_redactor']
