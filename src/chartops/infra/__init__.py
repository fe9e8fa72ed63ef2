"""Infrastructure helpers: cluster tunnels and database operations."""
