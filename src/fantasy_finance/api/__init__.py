"""HTTP API: routers, schemas and dependency providers."""
