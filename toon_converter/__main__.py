"""``python -m toon_converter``: run the converter from the package.

HOW: ``--gui`` opens the desktop window; any other arguments go to the
command-line converter (``python -m toon_converter data.json --stats``).
The installed ``toon-converter`` and ``toon-converter-gui`` scripts call
the same two main() functions.
"""

import sys

if __name__ == "__main__":
    if "--gui" in sys.argv:
        from toon_converter.gui import main as gui_main
        gui_main()
    else:
        from toon_converter.cli import main
        main()
