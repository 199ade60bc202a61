"""Figma integration: API client, cache, URL parsing, classifiers, entry point."""
