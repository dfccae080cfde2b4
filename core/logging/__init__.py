"""
Logging utilities for the Civic Platform backend.

This package provides:
- Structured JSON logging for log aggregation
- Sensitive data filtering for PII protection
- structlog configuration routed through the stdlib handlers
- Business event logging for moderation decisions
"""
