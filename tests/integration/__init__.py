"""Integration tests for Todoist project notes.

These tests run whole sync passes against a temporary vault on the real
filesystem, with an in-memory Todoist account standing in for the API.
"""
