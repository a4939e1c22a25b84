"""
Backend package for the MDRRMO disaster-preparedness app.

This package provides a FastAPI application over a storage adapter that
runs against a hosted Postgres database or, when no connection string is
configured, a local SQLite file for development.
"""
