"""NodeMate: an AI assistant for Node.js package management."""

__version__ = "1.0.0"
