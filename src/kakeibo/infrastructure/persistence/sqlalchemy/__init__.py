"""SQLAlchemy persistence for sync history and settings."""
