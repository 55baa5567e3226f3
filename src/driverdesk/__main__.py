"""Entry point for the 'python -m driverdesk' command."""

from driverdesk.cli import main

if __name__ == "__main__":
    main()
