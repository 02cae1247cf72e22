"""
Shared utilities for the Lab Access layer.

This package aggregates common building blocks consumed by the entitlement
components:

- config: Configuration via pydantic-settings
- logging: Structured logging with correlation context
- errors: Canonical error types
- test_helpers: Factories and fakes for tests

Do not import from lab_entitlements into shared/ except in test_helpers.
"""
