"""Formatters that turn an annotated node tree into markdown and token artifacts."""
