#!/usr/bin/env python3
"""
Main entry point for the ircwire client
"""

from ircwire.main import run

if __name__ == "__main__":
    run()
