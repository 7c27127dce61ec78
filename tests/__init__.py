"""Test package for http_problems."""
