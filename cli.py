#!/usr/bin/env python
"""
loginprobe CLI entry point.

Usage:
    python cli.py scan               # Security probes against baseUrl
    python cli.py audit              # Accessibility audit
    python cli.py perf               # Page load time check
    python cli.py report             # All checks, HTML and CSV reports
"""

from loginprobe.cli import main

if __name__ == "__main__":
    main()
