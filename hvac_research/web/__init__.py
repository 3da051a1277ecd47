"""FastAPI app, routers and the nightly rescore scheduler."""
