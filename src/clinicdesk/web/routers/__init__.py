"""Web routers, mounted by ``create_app``."""
