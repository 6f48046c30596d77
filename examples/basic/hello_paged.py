"""Wrap Markdown in print-layout scopes with flat @ markers."""

from patitas_paged import PagedMarkdown

source = """\
@spread ch1 template=spread

@page left
@section hero region=left .hero
# Hello

@page right
@section body region=right
More text.
"""

diagnostics = []
html = PagedMarkdown()(source, diagnostics=diagnostics)
print(html)
print("Diagnostics:", [d.type.value for d in diagnostics])
