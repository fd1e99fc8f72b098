"""Business logic services for the Denominator application.

Modules are imported directly (``denominator_stage.services.posts``) so that
models can depend on the identity types without import cycles.
"""
