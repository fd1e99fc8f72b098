"""HTTP API for Denominator Stage."""
