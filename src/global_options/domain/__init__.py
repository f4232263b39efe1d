"""Domain layer: collaborator protocols and value objects."""
