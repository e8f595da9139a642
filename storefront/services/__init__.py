"""Backend-facing services: money helpers, models, repositories, identity."""
