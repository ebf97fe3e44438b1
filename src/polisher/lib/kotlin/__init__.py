"""Kotlin formatter steps."""
