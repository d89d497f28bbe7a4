"""HTTP backend and client for the family API."""
