"""
Reaction tokens are free text; these tables map them onto a closed set of
canonical categories. Unknown tokens normalize to None: they are stored as sent
but left out of the per-category breakdown.
"""
from typing import Dict, Iterable, Optional

LIKE = "like"
LOVE = "love"
HAHA = "haha"
WOW = "wow"
SAD = "sad"
ANGRY = "angry"

CATEGORIES = (LIKE, LOVE, HAHA, WOW, SAD, ANGRY)

ALIASES: Dict[str, str] = {
    "like": LIKE,
    "liked": LIKE,
    "thumbsup": LIKE,
    "thumbs_up": LIKE,
    "+1": LIKE,
    "👍": LIKE,
    "love": LOVE,
    "heart": LOVE,
    "❤": LOVE,
    "❤️": LOVE,
    "😍": LOVE,
    "haha": HAHA,
    "lol": HAHA,
    "laugh": HAHA,
    "funny": HAHA,
    "😂": HAHA,
    "😆": HAHA,
    "wow": WOW,
    "surprised": WOW,
    "omg": WOW,
    "😮": WOW,
    "😲": WOW,
    "sad": SAD,
    "cry": SAD,
    "😢": SAD,
    "😭": SAD,
    "angry": ANGRY,
    "mad": ANGRY,
    "😠": ANGRY,
    "😡": ANGRY,
}


def normalize_reaction(token: Optional[str]) -> Optional[str]:
    if not token:
        return None
    return ALIASES.get(token.strip().lower())


def empty_breakdown() -> Dict[str, int]:
    return {category: 0 for category in CATEGORIES}


def breakdown(tokens: Iterable[str]) -> Dict[str, int]:
    """Count tokens per canonical category"""
    counts = empty_breakdown()
    for token in tokens:
        category = normalize_reaction(token)
        if category:
            counts[category] += 1
    return counts
