"""Usage retrieval, aggregation and export services."""
