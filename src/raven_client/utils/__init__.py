"""
Package: utils
Description: Shared helpers for the Raven client.

Provides structured logging, host discovery and origin-location
formatting used while building and delivering events.
"""
