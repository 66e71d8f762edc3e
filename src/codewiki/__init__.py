"""codewiki: turns a TypeScript/JavaScript codebase into a linked wiki."""

__version__ = "0.1.0"
