"""GitHub Actions billable usage reporting."""
