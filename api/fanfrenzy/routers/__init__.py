"""HTTP routers mounted by ``api.main``."""
