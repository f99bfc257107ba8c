"""
Post Ranking Service for the Creator Rankings backend
Top public posts by likes + bookmarks, optionally narrowed to one tag
"""

from datetime import datetime
import logging

import pytz

from config import Config
from services.ranking_service import engagement_count
from utils.error_handler import DatabaseError

logger = logging.getLogger(__name__)

DEFAULT_TITLE = 'Untitled'
DEFAULT_AUTHOR = 'Anonymous'
EPOCH = datetime(1970, 1, 1, tzinfo=pytz.utc)

def normalize_tags(tags):
    """Tags may be stored as a list or a single string."""
    if isinstance(tags, list):
        return tags
    if isinstance(tags, str) and tags.strip():
        return [tags.strip()]
    return []

def post_thumbnail(post_data):
    files = post_data.get('files') or []
    if not files:
        return None
    first_file = files[0] or {}
    return first_file.get('thumbnailUrl') or first_file.get('url')

def _created_at_key(post):
    created_at = post.get('created_at')
    if not isinstance(created_at, datetime):
        return EPOCH
    if created_at.tzinfo is None:
        return pytz.utc.localize(created_at)
    return created_at

class PostRankingService:
    def __init__(self, db, fetch_limit=None, top_n=None):
        self.db = db
        self.posts_ref = db.collection('posts')
        self.users_ref = db.collection('users')
        self.fetch_limit = fetch_limit or Config.POST_RANKING_FETCH_LIMIT
        self.top_n = top_n or Config.POST_RANKING_TOP_N

    def get_post_ranking(self, tag=None):
        """
        Rank public, non-exclusive posts by score.
        Newest posts win ties.
        """
        try:
            query = self.posts_ref.where('visibility', '==', 'public').limit(self.fetch_limit)
            post_docs = list(query.stream())
        except Exception as e:
            logger.error(f"Error fetching ranking posts: {str(e)}")
            raise DatabaseError(f"Failed to fetch ranking posts: {str(e)}")

        posts = []
        for post_doc in post_docs:
            post_data = post_doc.to_dict() or {}

            if post_data.get('isExclusiveContent') is True:
                continue

            likes = engagement_count(post_data, 'likes')
            bookmarks = engagement_count(post_data, 'bookmarks')
            posts.append({
                'id': post_doc.id,
                'title': post_data.get('title') or DEFAULT_TITLE,
                'likes': likes,
                'bookmarks': bookmarks,
                'thumbnail': post_thumbnail(post_data),
                'user_id': post_data.get('userId'),
                'user_name': post_data.get('userName') or DEFAULT_AUTHOR,
                'user_avatar': post_data.get('userAvatar'),
                'created_at': post_data.get('createdAt'),
                'tags': normalize_tags(post_data.get('tags')),
                'duration': post_data.get('duration') or '00:00',
                'score': likes + bookmarks
            })

        authors = self._fetch_authors({post['user_id'] for post in posts if post['user_id']})
        for post in posts:
            author = authors.get(post['user_id'])
            if author:
                post['user_name'] = author['user_name'] or post['user_name']
                post['user_avatar'] = author['user_avatar'] or post['user_avatar']

        if tag and tag != 'all':
            posts = [post for post in posts if tag in post['tags']]

        posts.sort(key=_created_at_key, reverse=True)
        posts.sort(key=lambda post: post['score'], reverse=True)

        ranked = [
            {**post, 'rank': rank}
            for rank, post in enumerate(posts[:self.top_n], 1)
        ]
        logger.info(f"Post ranking (tag={tag or 'all'}): {len(ranked)} of {len(post_docs)} posts")
        return ranked

    def _fetch_authors(self, user_ids):
        """
        Author display fields keyed by user id.
        A failed lookup only loses that author's enrichment.
        """
        authors = {}
        for user_id in sorted(user_ids):
            try:
                user_doc = self.users_ref.document(user_id).get()
            except Exception as e:
                logger.warning(f"Error fetching author {user_id}: {str(e)}")
                continue

            if user_doc.exists:
                user_data = user_doc.to_dict() or {}
                authors[user_id] = {
                    'user_name': user_data.get('displayName') or user_data.get('username'),
                    'user_avatar': user_data.get('photoURL')
                }
        return authors
