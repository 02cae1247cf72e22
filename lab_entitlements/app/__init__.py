"""
Entitlement layer for the Lab Access platform.

This package decides whether the current user's access grants satisfy a
required scope. It provides:

- app.rules: Entitlement model, scope matcher, resolver and tier mapping.
- app.store: Session-scoped entitlement collection and its reload lifecycle.
- app.gating: Access gate returning allowed/denied/pending decisions.
- app.adapters: Hosted auth session and PostgREST data API clients.
- app.main: create_access_layer() wiring everything from configuration.

Guidelines:
- Entitlement data is read-only here; grants are issued elsewhere.
- Fail closed: missing or unreadable data never grants access.
"""
