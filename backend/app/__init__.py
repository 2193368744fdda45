"""SNIC API backend."""
