"""
Shared utilities for tenant console components.

- logging_config: process-wide logging setup
"""
