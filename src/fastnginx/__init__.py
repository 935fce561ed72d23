"""fastnginx - Nginx server block automation with optional Let's Encrypt TLS."""

__version__ = "1.2.0"
