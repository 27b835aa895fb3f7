"""External services and the verification workflow."""
