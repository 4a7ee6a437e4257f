"""Portfolio reconstruction services."""
