"""SQLAlchemy-backed repository implementations.

Modules are imported directly (``...repositories.wallet_repository``) so that
domain packages can reference them lazily without import cycles.
"""
