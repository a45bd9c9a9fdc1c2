"""FastAPI surface of the admin dashboard."""
