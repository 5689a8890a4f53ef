"""
Unit Tests

Unit tests run in isolation without external dependencies.
The task store and the LLM provider are mocked.
"""
