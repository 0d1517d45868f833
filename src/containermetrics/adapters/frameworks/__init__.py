"""HTTP framework adapters exposing /metrics and /health."""
