"""View controllers: query state, caching and form checks behind the web routes."""
