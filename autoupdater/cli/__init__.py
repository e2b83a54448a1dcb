"""CLI module for autoupdater."""
