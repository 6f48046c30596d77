"""Render a Markdown file with layout markers.

HTML goes to stdout; diagnostics go to stderr as JSON.

Usage:
    python examples/cli/render_document.py examples/cli/demo.md > demo.html
"""

import sys
from pathlib import Path

from patitas_paged import PagedMarkdown, diagnostics_to_json

if len(sys.argv) != 2:
    print("Usage: render_document.py <file.md>", file=sys.stderr)
    sys.exit(1)

path = Path(sys.argv[1])
md = PagedMarkdown(plugins=["table", "strikethrough"])
doc = md.parse(path.read_text(encoding="utf-8"), source_file=str(path))

sys.stderr.write(diagnostics_to_json(doc.diagnostics, indent=2) + "\n")
sys.stdout.write(md.render(doc))
