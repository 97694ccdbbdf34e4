"""DocuCloud Solutions marketing site backend: lead intake and visitor analytics."""

__version__ = "1.0.0"
