"""HTTP client and per-resource clients for the BuildHive REST API."""
