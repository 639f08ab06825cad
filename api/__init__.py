"""HTTP layer over the ITAM registries."""
