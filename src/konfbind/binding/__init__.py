"""Binding core — shapes, coercion, text codecs, path resolution, value cell.

This layer depends only on the stdlib and pydantic.
It must never import from store, root, config, or cli.
"""
