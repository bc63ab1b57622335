"""HTTP surface: routes, schemas, and request middleware."""
