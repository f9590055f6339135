"""HTTP layer: dependencies, routes and rate limits."""
