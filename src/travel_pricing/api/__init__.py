"""API subpackage - FastAPI adapter over the engine."""
