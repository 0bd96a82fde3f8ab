# SPDX-License-Identifier: MIT

from notesync.cleanup import register_cleanup
from notesync.initialize import initialize
from notesync.terminal.app import run


def main() -> None:
    initialize()
    register_cleanup()
    run()


if __name__ == "__main__":
    main()
