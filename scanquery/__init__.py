"""scanquery - filter compiler for resource listings."""
