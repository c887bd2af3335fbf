"""Core subsystems: configuration, logging, classification, graph algorithms."""
