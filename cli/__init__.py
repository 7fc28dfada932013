"""Command-line interface for TransGate."""
