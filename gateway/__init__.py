"""OAuth login and upload gateway for the CMS."""
