"""Keygate - managed AI Gateway keys."""
