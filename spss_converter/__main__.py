"""Package entry point for ``python -m spss_converter``.

WHY: Users run the converter as ``python -m spss_converter script.sps``.
Python's ``-m`` flag looks for ``__main__.py`` inside the package and
executes it.

HOW: Delegates to the CLI's main() function.
"""

from spss_converter.cli import main

if __name__ == "__main__":
    main()
