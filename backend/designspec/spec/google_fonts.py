"""Google Fonts availability check with substitutes for proprietary fonts."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

# =====================================================================
# Catalogue
# =====================================================================

GOOGLE_FONTS = frozenset({
    "Abril Fatface", "Alegreya", "Alegreya Sans", "Alfa Slab One", "Amatic SC",
    "Anton", "Archivo", "Archivo Black", "Archivo Narrow", "Arimo", "Arvo",
    "Asap", "Assistant", "Barlow", "Barlow Condensed", "Barlow Semi Condensed",
    "Bebas Neue", "Bitter", "Bodoni Moda", "Cabin", "Cairo", "Caveat",
    "Cardo", "Chakra Petch", "Cinzel", "Comfortaa", "Commissioner",
    "Cormorant", "Cormorant Garamond", "Crimson Pro", "Crimson Text",
    "DM Mono", "DM Sans", "DM Serif Display", "DM Serif Text", "Dancing Script",
    "Domine", "Dosis", "EB Garamond", "Exo", "Exo 2", "Figtree", "Fira Code",
    "Fira Mono", "Fira Sans", "Fira Sans Condensed", "Fraunces", "Gelasio",
    "Heebo", "Hind", "IBM Plex Mono", "IBM Plex Sans", "IBM Plex Sans Condensed",
    "IBM Plex Serif", "Inconsolata", "Inter", "Inter Tight", "JetBrains Mono",
    "Josefin Sans", "Josefin Slab", "Jost", "Kanit", "Karla", "Lato", "Lexend",
    "Libre Baskerville", "Libre Franklin", "Lilita One", "Lobster", "Lora",
    "Manrope", "Merriweather", "Merriweather Sans", "Montserrat",
    "Montserrat Alternates", "Mukta", "Mulish", "Nanum Gothic", "Noto Sans",
    "Noto Sans JP", "Noto Sans KR", "Noto Sans SC", "Noto Sans TC", "Noto Serif",
    "Noto Serif JP", "Nunito", "Nunito Sans", "Old Standard TT", "Open Sans",
    "Oswald", "Outfit", "Overpass", "Oxygen", "PT Mono", "PT Sans",
    "PT Sans Narrow", "PT Serif", "Pacifico", "Permanent Marker", "Play",
    "Playfair Display", "Plus Jakarta Sans", "Poppins", "Prompt", "Public Sans",
    "Quicksand", "Rajdhani", "Raleway", "Red Hat Display", "Red Hat Text",
    "Roboto", "Roboto Condensed", "Roboto Flex", "Roboto Mono", "Roboto Serif",
    "Roboto Slab", "Rubik", "Sen", "Shadows Into Light", "Signika", "Sora",
    "Source Code Pro", "Source Sans 3", "Source Sans Pro", "Source Serif 4",
    "Space Grotesk", "Space Mono", "Spectral", "Syne", "Teko", "Tinos",
    "Titillium Web", "Ubuntu", "Ubuntu Mono", "Unbounded", "Urbanist",
    "Varela Round", "Vollkorn", "Work Sans", "Yanone Kaffeesatz", "Zilla Slab",
})

# Proprietary / system font -> closest Google Fonts alternative
FONT_SUBSTITUTIONS: Dict[str, str] = {
    "SF Pro": "Inter",
    "SF Pro Display": "Inter",
    "SF Pro Text": "Inter",
    "SF Pro Rounded": "Nunito",
    "SF Mono": "JetBrains Mono",
    "San Francisco": "Inter",
    "Helvetica": "Inter",
    "Helvetica Neue": "Inter",
    "Arial": "Arimo",
    "Segoe UI": "Open Sans",
    "Avenir": "Nunito Sans",
    "Avenir Next": "Nunito Sans",
    "Proxima Nova": "Montserrat",
    "Futura": "Jost",
    "Futura PT": "Jost",
    "Gotham": "Montserrat",
    "Circular": "DM Sans",
    "Circular Std": "DM Sans",
    "Graphik": "Inter",
    "Gilroy": "Plus Jakarta Sans",
    "Georgia": "Gelasio",
    "Times New Roman": "Tinos",
    "Garamond": "EB Garamond",
    "Didot": "Playfair Display",
    "Brandon Grotesque": "Josefin Sans",
    "Sofia Pro": "Outfit",
    "Aeonik": "Manrope",
    "PingFang SC": "Noto Sans SC",
    "Menlo": "JetBrains Mono",
    "Courier New": "Space Mono",
}

_WEIGHT_STYLE_RE = re.compile(
    r"\s*(Regular|Bold|Light|Medium|Thin|Black|Heavy|Book|Demi|Semi|SemiBold|"
    r"ExtraBold|ExtraLight|UltraLight|Italic)\s*",
    re.IGNORECASE,
)


# =====================================================================
# Checks
# =====================================================================


@dataclass
class FontCheckResult:
    font_family: str
    is_google_font: bool
    suggested_alternative: Optional[str] = None


def find_substitution(font_family: str) -> Optional[str]:
    """Google Fonts substitute, trying the name with weight/style words stripped."""
    if font_family in FONT_SUBSTITUTIONS:
        return FONT_SUBSTITUTIONS[font_family]
    normalized = " ".join(_WEIGHT_STYLE_RE.sub(" ", font_family).split())
    if normalized != font_family:
        return FONT_SUBSTITUTIONS.get(normalized)
    return None


def check_fonts(font_families: Iterable[str]) -> List[FontCheckResult]:
    results = []
    for family in font_families:
        is_google = family in GOOGLE_FONTS
        results.append(FontCheckResult(
            font_family=family,
            is_google_font=is_google,
            suggested_alternative=None if is_google else find_substitution(family),
        ))
    return results


def font_substitution_map(checks: List[FontCheckResult]) -> Dict[str, str]:
    """Original family -> substitute, for non-Google fonts that have one."""
    return {
        c.font_family: c.suggested_alternative
        for c in checks
        if not c.is_google_font and c.suggested_alternative
    }


def build_font_substitution_markdown(checks: List[FontCheckResult]) -> str:
    non_google = [c for c in checks if not c.is_google_font]
    if not non_google:
        return ""

    lines = ["## Font Substitutions\n"]
    lines.append(
        "The following fonts from the Figma design are not available on Google Fonts "
        "and have been substituted:\n"
    )
    lines.append("| Original Font | Substitute (Google Fonts) |")
    lines.append("|--------------|--------------------------|")
    for check in non_google:
        substitute = check.suggested_alternative or "*(pick a similar Google Font)*"
        lines.append(f"| {check.font_family} | {substitute} |")
    lines.append(
        "\nUse the substitute fonts in your implementation. Import them via Google "
        "Fonts `<link>` tag.\n"
    )
    return "\n".join(lines)
