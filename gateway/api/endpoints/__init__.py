"""Route modules: login redirect, OAuth callback, upload, health."""
