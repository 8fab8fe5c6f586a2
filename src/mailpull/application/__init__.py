"""Application layer - ports and the fetch use case."""
