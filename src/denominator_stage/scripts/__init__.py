"""Operational scripts: database bootstrap, migrations and the publish sweep."""
