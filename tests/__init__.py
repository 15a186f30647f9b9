"""
Datastore SDK Test Suite.

This package contains:
- unit/: Unit tests (no network, no backend)
- integration/: Client and transaction tests against a scripted transport
"""
