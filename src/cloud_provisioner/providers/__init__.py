"""Cloud-specific ResourceClient implementations."""
