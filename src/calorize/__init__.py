"""Versioned nutrition catalog and intake statistics."""
