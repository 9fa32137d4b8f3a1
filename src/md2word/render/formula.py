"""LaTeX typesetting and the HTML pages handed to the sandbox."""

from __future__ import annotations

from md2word.constants import DEFAULT_FONT
from md2word.errors import TypesetError

FORMULA_SELECTOR = "#formula"

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'


def latex_to_mathml(latex: str, display: bool = False) -> str:
    """Convert LaTeX math to a MathML fragment.

    Raises:
        TypesetError: If latex2mathml rejects the source
    """
    from latex2mathml.converter import convert

    try:
        return convert(latex, display="block" if display else "inline")
    except Exception as e:
        raise TypesetError(f"Cannot typeset {latex[:60]!r}: {e}") from e


def build_formula_page(mathml: str, display: bool, font: str = DEFAULT_FONT) -> str:
    """Wrap MathML in a self-contained page for screenshotting.

    The formula sits in an inline-block container so the element screenshot
    is cropped to the formula itself.
    """
    font_size = "20px" if display else "16px"
    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>
  body {{
    margin: 20px;
    font-family: "{font}", serif;
    background: white;
  }}
  #formula {{
    display: inline-block;
    padding: 4px;
    font-size: {font_size};
    background: white;
    color: black;
  }}
  math {{
    font-family: "Latin Modern Math", "STIX Two Math", "Cambria Math", serif;
  }}
</style>
</head>
<body><div id="formula">{mathml}</div></body>
</html>
"""


def build_graphic_page(svg: str) -> str:
    """Center an SVG in a minimal page for the sandbox fallback."""
    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>
  body {{
    margin: 0;
    padding: 20px;
    background: white;
    display: flex;
    justify-content: center;
    align-items: center;
    min-height: 100vh;
  }}
  svg {{
    max-width: 100%;
    height: auto;
  }}
</style>
</head>
<body>
{strip_xml_declaration(svg)}
</body>
</html>
"""


def ensure_xml_declaration(svg: str) -> str:
    if "<?xml" in svg:
        return svg
    return f"{XML_DECLARATION}\n{svg}"


def strip_xml_declaration(svg: str) -> str:
    """Remove a leading XML declaration, which is invalid inside HTML."""
    stripped = svg.lstrip()
    if stripped.startswith("<?xml"):
        end = stripped.find("?>")
        if end != -1:
            return stripped[end + 2 :].lstrip()
    return svg
