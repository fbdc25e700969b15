"""CLI for bankrec."""
