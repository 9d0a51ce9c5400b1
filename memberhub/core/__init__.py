"""
Core utilities shared across the memberhub package.

This package hosts configuration (env vars, feature toggles), credential
encryption and key loading, and small time helpers used by services.
"""
