"""Domain services: persistence adapter, registries, sessions and view guards."""
