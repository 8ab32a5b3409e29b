"""Shared test infrastructure: mocks and fixtures."""
