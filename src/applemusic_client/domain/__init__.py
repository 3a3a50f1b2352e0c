"""Domain layer: resource models, path segments and exceptions."""
