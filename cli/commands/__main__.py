"""CLI commands module entry point."""

from cli.commands.main import cli

if __name__ == "__main__":
    cli()
