"""Dependency-ordered cloud resource provisioning with guaranteed teardown."""

__version__ = "0.1.0"
