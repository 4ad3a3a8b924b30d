"""Sigil - operator key and ~/.aurum/.env handling."""
