"""Spaceseller order backend: wizard drafts, pricing, submission and provider reliability."""
