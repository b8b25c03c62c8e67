"""Configuration, persistence plumbing, security primitives and app wiring."""
