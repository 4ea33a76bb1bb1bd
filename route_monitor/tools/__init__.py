"""Standalone operator tools."""
