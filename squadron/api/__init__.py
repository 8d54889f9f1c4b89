"""HTTP API for the template lifecycle service."""
