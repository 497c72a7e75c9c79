#!/usr/bin/env python3
"""Serve the Questline XP Engine API with uvicorn.

The active ruleset is read from XP_ENGINE_RULES_FILE when set.
"""

import argparse

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Serve the Questline XP Engine API")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    uvicorn.run("questline.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
