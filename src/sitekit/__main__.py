"""Allow ``python -m sitekit``."""

from sitekit.cli.app import main

if __name__ == "__main__":
    main()
