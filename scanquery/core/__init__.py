"""Core filter handling: terms, column registries, compiler, controls."""
