"""Configuration, security primitives, logging and the error taxonomy."""
