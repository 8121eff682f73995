"""docchat: chat with uploaded PDF documents."""

__version__ = "0.1.0"
