"""Kakeibo account book backend: transaction data synchronization."""
