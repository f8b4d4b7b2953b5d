"""HTTP API layer: FastAPI application, dependencies, routes and schemas."""
