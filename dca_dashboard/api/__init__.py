"""HTTP API for the dashboard frontend."""
