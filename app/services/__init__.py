"""Service layer: generative clients and the archive service."""
