# Lodestar Launcher Package
"""
Keyboard launcher core: turns each keystroke into ranked results.

  - Apps (default), files (".name"), shell commands ("> cmd"),
    web searches ("g ..." / "yt ...") and inline arithmetic ("2^10")
  - Stale asynchronous answers are dropped by generation
"""

__version__ = "0.1.0"
