"""Infrastructure layer: persistence, authentication, HTTP API and outbound services."""
