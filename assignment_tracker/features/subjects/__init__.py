"""Subjects with display colors."""
