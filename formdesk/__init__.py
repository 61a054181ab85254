"""Formdesk: schema-driven form submissions."""
