"""Domain layer: entities, errors and ports. No I/O."""
