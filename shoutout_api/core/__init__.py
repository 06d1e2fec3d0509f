"""Core infrastructure: configuration, logging, errors and dependency wiring"""
