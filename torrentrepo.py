#!/usr/bin/env python3
"""
Convenience shim to run torrentrepo from a source checkout.
Usage: python torrentrepo.py [--verify|--help|--config PATH|--magnet URI]
"""

from torrentrepo.cli import main


if __name__ == "__main__":
    main()
