"""Admin web API (FastAPI) for the score library."""
