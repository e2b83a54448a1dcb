"""
Entry point for running autoupdater as a module: python -m autoupdater
"""

from autoupdater.cli.commands import app

if __name__ == "__main__":
    app()
