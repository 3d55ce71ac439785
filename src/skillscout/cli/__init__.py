"""Diagnostic command-line interface for skillscout."""
