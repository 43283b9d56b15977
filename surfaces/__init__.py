"""Surface types and their intersection kernels."""
