"""CLI command groups for skillscout."""
