"""Lane geometry and color helpers."""
