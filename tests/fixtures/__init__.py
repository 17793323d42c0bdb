"""Shared test fixtures for s3db tests."""
