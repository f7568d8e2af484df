"""Application wiring: factory, lifespan and background tasks."""
