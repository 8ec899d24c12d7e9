"""CLI entry point - wrapper for running from a checkout

Equivalent to the installed ``social-gateway`` command.
"""

from cli.main import main

if __name__ == "__main__":
    main()
