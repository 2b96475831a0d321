#!/usr/bin/env python3
"""
Main entry point for the Twitch chat client
"""

from twitchchat.main import run

if __name__ == "__main__":
    run()
