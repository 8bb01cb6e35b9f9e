"""Sitekit command-line interface."""
