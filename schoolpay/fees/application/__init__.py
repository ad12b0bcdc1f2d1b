"""Application layer: input schemas and payment services."""
