"""Services subpackage - configuration loading and slab management."""
