"""Flask web application."""
