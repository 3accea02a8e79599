"""
Entry point for `python -m sigslot`.

Usage:
    python -m sigslot sign document.pdf -c "openssl cms -sign ..." --invisible
    python -m sigslot timestamp document.pdf -c "./tsa-client" --rect 36 36 246 106
    python -m sigslot info document_signed.pdf
"""

from .ui.cli import main

main()
