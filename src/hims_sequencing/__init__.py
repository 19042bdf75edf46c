"""Sequential identifier allocation for hospital registration and check-in."""
