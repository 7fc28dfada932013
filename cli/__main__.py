"""CLI entry point for TransGate."""

from cli.commands.main import cli

if __name__ == "__main__":
    cli()
