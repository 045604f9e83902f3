"""
Vector and text similarity used by badge image matching.

The ranking is a plain linear scan over every stored embedding; the catalog
is small enough that no index is kept.
"""

import json
import math
import re
from typing import Any, Dict, List, Optional, Sequence

DEFAULT_THRESHOLD = 0.85
DEFAULT_TOP_N = 3

TEXT_MATCH_MIN_SCORE = 0.1
TEXT_FILTER_MAX_SHARE = 0.8

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors; 0.0 for empty, mismatched or zero vectors."""
    if not a or not b or len(a) != len(b):
        return 0.0
    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


def parse_embedding(value: Any) -> Optional[List[float]]:
    """Stored embeddings come back as a list or as a pgvector/JSON string."""
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return None
    if not isinstance(value, list):
        return None
    try:
        return [float(v) for v in value]
    except (TypeError, ValueError):
        return None


def _words(text: str) -> set:
    normalized = _NON_ALNUM.sub("", text.lower()).strip()
    return {w for w in normalized.split() if len(w) > 2}


def text_similarity(text1: Optional[str], text2: Optional[str]) -> float:
    """Jaccard similarity over lower-cased words longer than two characters."""
    if not text1 or not text2:
        return 0.0
    words1 = _words(text1)
    words2 = _words(text2)
    if not words1 or not words2:
        return 0.0
    return len(words1 & words2) / len(words1 | words2)


def badge_text(badge: Dict[str, Any]) -> str:
    return f"{badge.get('name') or ''} {badge.get('description') or ''} {badge.get('maker_id') or ''}"


def prefilter_by_text(candidates: List[Dict[str, Any]], user_text: Optional[str]) -> List[Dict[str, Any]]:
    """
    Narrow candidates to those whose badge text resembles user_text.

    The narrowed list is used only when it is non-empty and smaller than 80%
    of the input; otherwise the full list is returned unchanged.
    """
    if not user_text or len(user_text.strip()) <= 2:
        return candidates
    filtered = [
        c for c in candidates
        if text_similarity(user_text, badge_text(c.get("badge") or {})) > TEXT_MATCH_MIN_SCORE
    ]
    if filtered and len(filtered) < len(candidates) * TEXT_FILTER_MAX_SHARE:
        return filtered
    return candidates


def rank_matches(
    query: Sequence[float],
    candidates: List[Dict[str, Any]],
    threshold: float = DEFAULT_THRESHOLD,
    top_n: int = DEFAULT_TOP_N,
) -> List[Dict[str, Any]]:
    """
    Score candidates ({"badge": {...}, "embedding": [...]}) against query.

    Returns at most top_n matches at or above threshold, best first, one per
    badge. Each match has badge, similarity and confidence (0-100).
    """
    best: Dict[Any, Dict[str, Any]] = {}
    for candidate in candidates:
        badge = candidate.get("badge") or {}
        embedding = candidate.get("embedding")
        if not embedding:
            continue
        score = cosine_similarity(query, embedding)
        if score < threshold:
            continue
        key = badge.get("id") or id(candidate)
        if key not in best or score > best[key]["similarity"]:
            best[key] = {
                "badge": badge,
                "similarity": score,
                "confidence": round(score * 100),
            }
    ranked = sorted(best.values(), key=lambda m: m["similarity"], reverse=True)
    return ranked[:top_n]
