"""Aggregate statistics and acceptance checks for collections."""

from __future__ import annotations

from collections import Counter
from typing import Callable, Optional

from curation.collections.models import Collection, CollectionCriteria, CollectionStats
from curation.works.models import Work

TOP_THEME_COUNT = 5


def compute_stats(collection: Collection, resolve_work: Callable[[str], Optional[Work]]) -> CollectionStats:
    """Recompute stats by re-reading every member work.

    Works without a (truthy) quality score are left out of the average.
    View and share counters carry over unchanged.
    """
    theme_counts: Counter = Counter()
    total_quality = 0.0
    quality_count = 0

    for entry in collection.works:
        work = resolve_work(entry.id)
        if work is None:
            continue
        theme_counts.update(work.themes)
        if work.quality_score:
            total_quality += work.quality_score
            quality_count += 1

    # Counter.most_common keeps first-seen order among equal counts.
    top_themes = [theme for theme, _ in theme_counts.most_common(TOP_THEME_COUNT)]

    return CollectionStats(
        total_works=len(collection.works),
        average_quality=total_quality / quality_count if quality_count else 0,
        top_themes=top_themes,
        view_count=collection.stats.view_count or 0,
        share_count=collection.stats.share_count or 0,
    )


def meets_criteria(work: Work, criteria: CollectionCriteria) -> bool:
    meets_quality = not criteria.min_quality or (work.quality_score or 0) >= criteria.min_quality
    meets_themes = not criteria.required_themes or any(
        theme in work.themes for theme in criteria.required_themes
    )
    return meets_quality and meets_themes
