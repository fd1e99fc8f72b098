"""Denominator Stage: blog and community API."""
