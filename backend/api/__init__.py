"""Code Rooms API package."""
