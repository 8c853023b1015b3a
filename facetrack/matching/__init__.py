"""Patch matcher adapters."""
