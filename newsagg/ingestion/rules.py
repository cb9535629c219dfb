"""Per-source page extraction rules."""

from typing import Dict, Optional

from ..config import ExtractionRule, SelectorPattern, SourceConfig

OG_IMAGE = SelectorPattern(css='meta[property="og:image"]', attr="content")

DEFAULT_IMAGE_RULE = ExtractionRule(selectors=[OG_IMAGE])


def _og_then(css: str) -> ExtractionRule:
    return ExtractionRule(selectors=[OG_IMAGE, SelectorPattern(css=css, attr="src")])


IMAGE_RULES: Dict[str, ExtractionRule] = {
    "vremyan": _og_then('img[class*="article"]'),
    "niann": _og_then('img[class*="news"]'),
    "nta_pfo": _og_then('img[class*="photo"]'),
    "vgoroden": _og_then('img[class*="article"]'),
}


def image_rule_for(source: SourceConfig, registry: Optional[Dict[str, ExtractionRule]] = None) -> ExtractionRule:
    """Source override first, then the registry entry, then Open Graph only."""
    if source.image_rule is not None:
        return source.image_rule
    rules = IMAGE_RULES if registry is None else registry
    return rules.get(source.id, DEFAULT_IMAGE_RULE)
