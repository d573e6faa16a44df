"""Stores concretos."""

from app.infra.stores.sqlite_credential_store import SqliteCredentialStore

__all__ = ["SqliteCredentialStore"]
