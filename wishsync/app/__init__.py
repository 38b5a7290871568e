"""Application wiring: typed settings and the composition root."""
