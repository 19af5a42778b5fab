"""Shared helpers for the LLM client, uploads and formatting."""
