"""Package entry point for ``python -m srt_merger``.

WHY: Users run the tool as ``python -m srt_merger input.srt --mode merge``.
Python's ``-m`` flag looks for ``__main__.py`` inside the package and
executes it.

HOW: Delegates straight to the CLI's main() function.
"""

from srt_merger.cli import main

if __name__ == "__main__":
    main()
