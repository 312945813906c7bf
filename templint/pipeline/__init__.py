"""Lint pipeline: classify nodes, load rules, walk trees, index sources and report."""
