"""
Creator Ranking Service for the Creator Rankings backend
Period-windowed leaderboard: accumulate post engagement per creator,
join approved creator profiles, rank by likes + bookmarks
"""

from dataclasses import dataclass, field
from datetime import datetime
import itertools
import logging
import threading

import pytz

from config import Config
from services.content_store import ContentStore, get_window_start
from utils.error_handler import DatabaseError
from utils.formatting import present_ranked_entry

logger = logging.getLogger(__name__)

POSTS_COLLECTION = 'posts'
USERS_COLLECTION = 'users'

FETCH_FAILED_MESSAGE = 'Failed to load the creator ranking. Please try again.'
EMPTY_RANKING_MESSAGE = 'No ranking data for this period yet.'

# Ordered fallback chains: first non-empty field wins
DISPLAY_NAME_FIELDS = ('displayName', 'name')
AVATAR_FIELDS = ('photoURL', 'avatar')

def engagement_count(record, field_name):
    """Numeric engagement counter, 0 when missing or malformed."""
    value = record.get(field_name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value

def first_non_empty(data, fields, default):
    for field_name in fields:
        value = data.get(field_name)
        if value:
            return value
    return default

def is_approved_creator(profile):
    return bool(profile.get('isCreator')) and profile.get('creatorStatus') == 'approved'

def accumulate_creator_stats(records):
    """
    Fold post records into per-owner totals.

    Returns a dict keyed by owner id in first-encounter order. Records without
    an owner are skipped.
    """
    stats = {}
    for record in records:
        owner_id = record.get('userId')
        if not owner_id:
            continue

        if owner_id not in stats:
            stats[owner_id] = {
                'owner_id': owner_id,
                'total_likes': 0,
                'total_bookmarks': 0,
                'total_views': 0,
                'record_count': 0
            }

        owner_stats = stats[owner_id]
        owner_stats['total_likes'] += engagement_count(record, 'likes')
        owner_stats['total_bookmarks'] += engagement_count(record, 'bookmarks')
        owner_stats['total_views'] += engagement_count(record, 'views')
        owner_stats['record_count'] += 1

    return stats

def build_creator_entry(profile, owner_stats,
                        default_name=Config.DEFAULT_DISPLAY_NAME,
                        default_avatar=Config.DEFAULT_AVATAR_URL):
    return {
        'id': owner_stats['owner_id'],
        'display_name': first_non_empty(profile, DISPLAY_NAME_FIELDS, default_name),
        'avatar_url': first_non_empty(profile, AVATAR_FIELDS, default_avatar),
        'follower_count': engagement_count(profile, 'followers'),
        'total_likes': owner_stats['total_likes'],
        'total_bookmarks': owner_stats['total_bookmarks'],
        'total_views': owner_stats['total_views'],
        'post_count': owner_stats['record_count'],
        'monthly_earnings': engagement_count(profile, 'monthlyEarnings'),
        'is_verified': bool(profile.get('isVerified', False)),
        'trend': profile.get('trend') or 'stable',
        'score': owner_stats['total_likes'] + owner_stats['total_bookmarks']
    }

def rank_creators(entries, top_n=Config.RANKING_TOP_N):
    """
    Stable sort by score (highest first), keep the top N, assign 1-based ranks.
    Equal scores keep their relative input order.
    """
    ordered = sorted(entries, key=lambda entry: entry['score'], reverse=True)
    return [
        {**entry, 'rank': rank}
        for rank, entry in enumerate(ordered[:top_n], 1)
    ]

@dataclass(frozen=True)
class RankingSnapshot:
    period: str
    run_id: int
    status: str
    entries: tuple = ()
    message: str = None
    generated_at: datetime = field(default_factory=lambda: datetime.now(pytz.utc))

    def to_dict(self, currency=Config.CURRENCY):
        return {
            'period': self.period,
            'status': self.status,
            'message': self.message,
            'entries': [present_ranked_entry(entry, currency) for entry in self.entries],
            'total_entries': len(self.entries),
            'run_id': self.run_id,
            'generated_at': self.generated_at.isoformat()
        }

class CreatorRankingService:
    def __init__(self, db, content_store=None, top_n=None):
        self.db = db
        self.content_store = content_store or ContentStore(db)
        self.top_n = top_n or Config.RANKING_TOP_N

    def enrich_creators(self, stats):
        """
        Join accumulated stats with approved creator profiles.

        Owners whose profile is missing or not approved are dropped. Output
        follows the owners' first-encounter order in `stats`.
        """
        profiles = self.content_store.fetch_profiles_by_ids(USERS_COLLECTION, list(stats))
        profiles_by_id = {profile['id']: profile for profile in profiles}

        entries = []
        for owner_id, owner_stats in stats.items():
            profile = profiles_by_id.get(owner_id)
            if profile is None:
                logger.debug(f"Skipping creator {owner_id}: no profile")
                continue
            if not is_approved_creator(profile):
                logger.debug(f"Skipping creator {owner_id}: not an approved creator")
                continue
            entries.append(build_creator_entry(profile, owner_stats))

        return entries

    def get_creator_ranking(self, period='monthly', now=None):
        """
        Compute the creator ranking for a period from scratch.
        Raises ValidationError for unknown periods and DatabaseError on read failure.
        """
        window_start = get_window_start(period, now)
        records = self.content_store.fetch_records_in_window(POSTS_COLLECTION, window_start)

        stats = accumulate_creator_stats(records)
        if not stats:
            return []

        entries = self.enrich_creators(stats)
        ranked = rank_creators(entries, self.top_n)

        logger.info(
            f"Creator ranking ({period}): {len(records)} posts, {len(stats)} owners, "
            f"{len(entries)} approved, {len(ranked)} ranked"
        )
        return ranked

    def build_snapshot(self, period='monthly', run_id=0, now=None):
        """
        Run one ranking computation and capture its outcome as a snapshot.
        Read failures become an error snapshot with no partial entries.
        """
        # Unknown periods are a caller error, not an error snapshot
        get_window_start(period, now)

        try:
            entries = self.get_creator_ranking(period, now)
        except DatabaseError as e:
            logger.error(f"Error computing creator ranking ({period}): {e.message}")
            return RankingSnapshot(period=period, run_id=run_id, status='error',
                                   message=FETCH_FAILED_MESSAGE)

        if not entries:
            return RankingSnapshot(period=period, run_id=run_id, status='empty',
                                   message=EMPTY_RANKING_MESSAGE)

        return RankingSnapshot(period=period, run_id=run_id, status='ok',
                               entries=tuple(entries))

class RankingBoard:
    """
    Latest published ranking per period.

    Every refresh takes a new run id. A finished run is published only if no
    newer run for the same period has published already, so a slow, older
    computation can never overwrite a fresher result.
    """

    def __init__(self, ranking_service):
        self.ranking_service = ranking_service
        self._lock = threading.Lock()
        self._run_ids = itertools.count(1)
        self._published = {}

    def begin_run(self):
        with self._lock:
            return next(self._run_ids)

    def publish(self, snapshot):
        with self._lock:
            current = self._published.get(snapshot.period)
            if current is not None and current.run_id > snapshot.run_id:
                logger.warning(
                    f"Discarding stale {snapshot.period} ranking run {snapshot.run_id} "
                    f"(run {current.run_id} already published)"
                )
                return False
            self._published[snapshot.period] = snapshot
            return True

    def current(self, period):
        with self._lock:
            return self._published.get(period)

    def refresh(self, period='monthly', now=None):
        run_id = self.begin_run()
        snapshot = self.ranking_service.build_snapshot(period, run_id, now)
        self.publish(snapshot)
        return self.current(period)
