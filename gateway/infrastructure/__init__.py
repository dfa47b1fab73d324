"""Infrastructure: code cache and adapters for GitHub and the storage API."""
