"""Test suite for the Kakeibo sync service."""
