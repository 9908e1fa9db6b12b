"""Core domain: snippet model, query engine, permissions, services."""
