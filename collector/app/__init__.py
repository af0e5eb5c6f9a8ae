"""FastAPI application for first-party event ingestion."""
