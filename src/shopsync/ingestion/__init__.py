"""Ingestion helpers: turning raw server payloads into typed items."""
