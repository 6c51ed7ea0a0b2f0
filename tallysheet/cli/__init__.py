"""Unified command-line interface for tallysheet.

Usage:
    tally serve [--host] [--port]
    tally submit <json_file> [--url] [--force]
    tally migrate
    tally stats
"""
