#!/usr/bin/env python3
"""Stack deploy tools: CLI entrypoint."""

from stackdock.stackdock import main

if __name__ == "__main__":
    main()
