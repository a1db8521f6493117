# SPDX-License-Identifier: MIT

from geonotes.cleanup import register_cleanup
from geonotes.initialize import initialize
from geonotes.terminal.app import run


def main() -> None:
    initialize()
    register_cleanup()
    run()


if __name__ == "__main__":
    main()
