"""Stencil CLI commands."""
