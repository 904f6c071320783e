"""Outbound HTTP: article pages and the upstream listing API."""
