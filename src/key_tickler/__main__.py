"""``python -m key_tickler`` and the ``key-tickler`` console script."""
from key_tickler.cli import cli


def main():
    cli()


if __name__ == "__main__":
    main()
