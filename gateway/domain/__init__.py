"""Domain layer: exceptions and value types shared by handlers and adapters."""
