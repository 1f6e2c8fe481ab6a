"""Core backend infrastructure for the User Management backend.

This package contains configuration, logging, database, entity discovery,
schema synchronization and the composition root used by the FastAPI
application entrypoint.
"""
